"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from library_api.app.core.notifications import Notifier
from library_api.app.services.library_app import LibraryApp


def get_library(request: Request) -> LibraryApp:
    """Return the coordinator built by ``create_app``."""
    return request.app.state.library


def get_notifier(request: Request) -> Notifier:
    return request.app.state.library.notifier
