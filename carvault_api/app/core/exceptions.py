"""
Domain exceptions shared by services and endpoints.

Services raise these instead of ``HTTPException`` so that they stay
usable outside a request.  Each class carries a machine readable
``kind`` and the HTTP status it maps to; the handlers registered in
``main.create_app`` turn them into ``{"kind": ..., "message": ...}``
responses.
"""

from typing import Any, Dict, List, Optional


class CarVaultError(Exception):
    """Base class for all errors reported to API clients."""

    kind = "ServerError"
    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        errors: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.headers = headers

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class FieldValidationError(CarVaultError):
    """A field is missing, malformed or out of range."""

    kind = "ValidationError"
    status_code = 400


class EmailTakenError(CarVaultError):
    kind = "EmailTaken"
    status_code = 400


class UnauthorizedError(CarVaultError):
    """Missing, expired or invalid credentials."""

    kind = "Unauthorized"
    status_code = 401

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(CarVaultError):
    """The record does not exist or belongs to another user.

    Both cases produce the same error so callers cannot test for
    other users' records.
    """

    kind = "NotFound"
    status_code = 404


class ConflictError(CarVaultError):
    """The write collides with existing data (e.g. a duplicate plate)."""

    kind = "Conflict"
    status_code = 400
