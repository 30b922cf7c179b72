"""Shared response helpers for the bucket and file routers."""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

from akave_api.models.responses import ErrorResponse, OperationResponse
from akave_api.models.storage import ErrorPayload, OperationResult
from akave_api.utils.logging import get_logger

log = get_logger(__name__)


def respond(result: OperationResult) -> OperationResponse | JSONResponse:
    """Success envelope, or 502 when the tool printed a JSON error."""
    if isinstance(result.data, ErrorPayload):
        log.warning(
            "api.tool_error",
            operation=result.operation.value,
            payload=result.data.payload,
        )
        body = ErrorResponse(error=result.data.payload, error_type="ToolError")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=body.model_dump(),
        )
    return OperationResponse.from_result(result)
