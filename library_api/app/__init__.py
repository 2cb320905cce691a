"""
Application package initializer.

The application follows a three‑tier layout: ``core`` holds the
document store, configuration and cross‑cutting helpers, ``services``
holds the repository, the domain services and the ``LibraryApp``
coordinator, and ``api`` exposes the coordinator over HTTP.  Versioning
is handled by grouping routers under the ``api/<version>/`` hierarchy.
"""

from .main import app, create_app  # noqa: F401
