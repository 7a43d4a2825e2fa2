"""
Response models for procedure calls
"""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel


class ResponseError(BaseModel):
    """Error details in unified response"""
    type: Literal[
        "VALIDATION_ERROR",       # 400 - Input failed a local constraint
        "NOT_FOUND",              # 404 - Unknown procedure
        "METHOD_NOT_ALLOWED",     # 405 - Wrong verb for the procedure kind
        "CONSTRAINT_VIOLATION",   # 409 - Unique constraint violation
        "CONNECTION_ERROR",       # 503 - Store unreachable
        "INTERNAL_ERROR"          # 500 - Anything else
    ]
    message: str
    details: Optional[Dict[str, Any]] = None


class ProcedureResponse(BaseModel):
    """Unified response envelope for all procedure calls"""
    ok: bool
    procedure: Optional[str] = None
    kind: Optional[Literal["query", "mutation"]] = None
    data: Any = None
    error: Optional[ResponseError] = None

    @classmethod
    def success(cls, procedure: str, kind: str, data: Any) -> "ProcedureResponse":
        """Create successful response"""
        return cls(ok=True, procedure=procedure, kind=kind, data=data)

    @classmethod
    def failure(
        cls,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        procedure: Optional[str] = None,
        kind: Optional[str] = None
    ) -> "ProcedureResponse":
        """Create error response"""
        return cls(
            ok=False,
            procedure=procedure,
            kind=kind,
            error=ResponseError(type=error_type, message=message, details=details)
        )
