"""
Procedure call API routes

GET  /api/rpc/{namespace}.{operation}?input=<json>  -> queries (safe to retry/cache)
POST /api/rpc/{namespace}.{operation}  body=<json>  -> mutations
GET  /api/rpc                                       -> procedure catalogue
"""

import asyncio
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from rpc.errors import MethodNotAllowed, ProcedureError, ValidationError
from rpc.models.response import ProcedureResponse
from rpc.procedures.base import ProcedureKind
from rpc.registry import ProcedureRegistry, get_registry
from utils.error_handling import StructuredLogger, set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)


def _decode_input(raw: Optional[str]) -> Any:
    if raw is None or raw.strip() == "":
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        # JSONDecodeError, or the int conversion limit for very long numbers
        raise ValidationError(
            "Input is not valid JSON",
            [{"field": "input", "message": str(e), "code": "invalid_json"}]
        )


def _log_detached_failure(path: str):
    """Done-callback that reports a shielded write whose caller already went away"""

    def callback(task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"{path} failed after the caller disconnected: {error!r}")

    return callback


def _error_response(error: ProcedureError, path: str, kind: Optional[str]) -> JSONResponse:
    envelope = ProcedureResponse.failure(
        error.error_type, error.message, error.details, procedure=path, kind=kind
    )
    return JSONResponse(status_code=error.status_code, content=envelope.model_dump(mode="json"))


async def _dispatch(
    request: Request,
    registry: ProcedureRegistry,
    path: str,
    verb_kind: ProcedureKind,
    raw_input: Optional[str]
) -> JSONResponse:
    """Resolve, check the verb against the procedure kind, decode, call, serialize"""
    set_endpoint_context(f"rpc:{path}")
    kind = None
    try:
        procedure = registry.resolve(path)
        kind = procedure.kind.value
        if procedure.kind != verb_kind:
            expected = "GET" if procedure.kind == ProcedureKind.QUERY else "POST"
            raise MethodNotAllowed(f"{path} is a {kind}; call it with {expected}")

        payload = _decode_input(raw_input)
        logger.info(f"Dispatching {kind} {path}")

        if procedure.kind == ProcedureKind.MUTATION:
            # Once dispatched, a write runs to completion even if the caller goes away
            task = asyncio.ensure_future(procedure.call(payload))
            try:
                data = await asyncio.shield(task)
            except asyncio.CancelledError:
                task.add_done_callback(_log_detached_failure(path))
                raise
        else:
            data = await procedure.call(payload)

    except ProcedureError as e:
        if e.status_code >= 500:
            logger.error(f"{path} failed: {e.error_type}: {e.message}")
        return _error_response(e, path, kind)
    except Exception as e:
        trace_id = StructuredLogger.log_error(
            "procedure_error",
            f"Unhandled exception in {path}: {e}",
            request=request,
            exception=e
        )
        envelope = ProcedureResponse.failure(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            {"trace_id": trace_id},
            procedure=path,
            kind=kind
        )
        return JSONResponse(status_code=500, content=envelope.model_dump(mode="json"))

    envelope = ProcedureResponse.success(path, kind, data)
    return JSONResponse(status_code=200, content=envelope.model_dump(mode="json"))


@router.get("")
async def list_procedures(registry: ProcedureRegistry = Depends(get_registry)):
    """Catalogue of callable procedures"""
    return {"procedures": registry.describe()}


@router.get("/{path}")
async def call_query(
    path: str,
    request: Request,
    input: Optional[str] = Query(None, description="JSON-encoded procedure input"),
    registry: ProcedureRegistry = Depends(get_registry)
):
    """Call a query procedure"""
    return await _dispatch(request, registry, path, ProcedureKind.QUERY, input)


@router.post("/{path}")
async def call_mutation(
    path: str,
    request: Request,
    registry: ProcedureRegistry = Depends(get_registry)
):
    """Call a mutation procedure"""
    body = await request.body()
    try:
        raw_input = body.decode("utf-8") if body else None
    except UnicodeDecodeError as e:
        error = ValidationError(
            "Input is not valid UTF-8",
            [{"field": "input", "message": str(e), "code": "invalid_encoding"}]
        )
        return _error_response(error, path, None)
    return await _dispatch(request, registry, path, ProcedureKind.MUTATION, raw_input)
