"""
Error taxonomy shared by the gateway, the procedures and the transport
"""

from typing import Any, Dict, List, Optional


class ProcedureError(Exception):
    """Base class for every structured failure a procedure call can report"""

    error_type = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.error_type,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ProcedureError):
    """Input failed a locally checked constraint; nothing reached the store"""

    error_type = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, {"fields": field_errors or []})
        self.field_errors = field_errors or []


class ConstraintViolation(ProcedureError):
    """The store rejected a write because of a uniqueness constraint"""

    error_type = "CONSTRAINT_VIOLATION"
    status_code = 409


class StoreConnectionError(ProcedureError):
    """The store is unreachable or no pooled connection became available in time"""

    error_type = "CONNECTION_ERROR"
    status_code = 503


class NotFound(ProcedureError):
    """Unknown procedure path. Delete never raises this."""

    error_type = "NOT_FOUND"
    status_code = 404


class MethodNotAllowed(ProcedureError):
    """A query was called with a write verb or a mutation with a read verb"""

    error_type = "METHOD_NOT_ALLOWED"
    status_code = 405


ERROR_TYPES = {
    cls.error_type: cls
    for cls in (ValidationError, ConstraintViolation, StoreConnectionError, NotFound, MethodNotAllowed)
}


def error_from_payload(payload: Dict[str, Any]) -> ProcedureError:
    """Rebuild a typed error from the `error` object of a response envelope"""
    error_type = payload.get("type")
    message = payload.get("message") or "Procedure call failed"
    details = payload.get("details") or {}

    if error_type == ValidationError.error_type:
        return ValidationError(message, details.get("fields"))

    cls = ERROR_TYPES.get(error_type)
    if cls is None:
        error = ProcedureError(message, details or None)
        error.error_type = error_type or ProcedureError.error_type
        return error
    return cls(message, details or None)
