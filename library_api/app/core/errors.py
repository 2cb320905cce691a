"""
Error taxonomy shared by every layer.

All errors carry a human‑readable message that is eventually shown to
the end user verbatim.  They derive from ``ValueError`` so callers that
only care about "the operation was rejected" can keep catching that.
"""


class LibraryError(ValueError):
    """Base class; also used for unexpected storage failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def with_context(self, context: str) -> "LibraryError":
        """Return an error of the same category prefixed with ``context``."""
        wrapped = type(self)(f"{context}: {self.message}")
        wrapped.__cause__ = self
        return wrapped


class ValidationError(LibraryError):
    """Input has the wrong shape or format."""

    status_code = 400


class NotFoundError(LibraryError):
    """A referenced document does not exist."""

    status_code = 404


class ConflictError(LibraryError):
    """Duplicate identity or a dependent row blocks the operation."""

    status_code = 409


class BusinessRuleError(LibraryError):
    """A domain rule (loan limit, availability) rejects the operation."""

    status_code = 422


def wrap_error(exc: Exception, context: str) -> LibraryError:
    """Prefix ``exc`` with ``context`` keeping its category.

    Exceptions that are not ``LibraryError`` (e.g. ``sqlite3.Error``)
    become a plain ``LibraryError``.
    """
    if isinstance(exc, LibraryError):
        return exc.with_context(context)
    wrapped = LibraryError(f"{context}: {exc}")
    wrapped.__cause__ = exc
    return wrapped

