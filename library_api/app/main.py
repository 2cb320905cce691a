"""
Main entrypoint for the Library API.

This module assembles the FastAPI application, sets up logging, wires
the library layers and includes versioned routers.  The ``create_app``
function builds and configures the app, which is then instantiated at
module import time as ``app``, e.g.::

    uvicorn library_api.app.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import DocumentStore
from .core.errors import LibraryError
from .core.logging_config import setup_logging
from .services.library_app import build_library_app


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    """Return the error message verbatim with the status of its category."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the module level
        ``settings`` read from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.  The coordinator is
        available as ``app.state.library``.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    store = DocumentStore(settings.database_url)
    app.state.settings = settings
    app.state.store = store
    app.state.library = build_library_app(settings, store=store)

    app.add_exception_handler(LibraryError, library_error_handler)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file on first start.
        store.init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
