"""Domain errors raised by the generation pipeline and profile services.

Each error carries the HTTP status the API layer reports it with, so the
FastAPI exception handler and the CLI can share one taxonomy.
"""

from __future__ import annotations


class CVTailorError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(CVTailorError):
    """Required input is missing or malformed; nothing downstream was called."""

    status_code = 400


class AuthenticationFailure(CVTailorError):
    status_code = 401


class PermissionDenied(CVTailorError):
    status_code = 403


class NotFound(CVTailorError):
    """Referenced user or application is absent or not owned by the caller."""

    status_code = 404


class RenderFailure(CVTailorError):
    """A document encoder failed; no files were linked to an application."""

    status_code = 500


class GenerationFailure(CVTailorError):
    """The language model errored, timed out, or returned unusable content."""

    status_code = 502
