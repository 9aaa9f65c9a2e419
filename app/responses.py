# =============================================================================
# app/responses.py - Response Envelope
# =============================================================================
# Every route answers with the same JSON shape:
#
#   success: {"data": <payload>, "meta": {...}}      (meta only when given)
#   error:   {"error": {"code", "message", "details"}} (details only when given)
#
# 204 responses carry no body at all.
# =============================================================================

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response


def pagination_meta(limit: int, offset: int, total: int) -> dict[str, Any]:
    """Build the `meta` block for a paginated list."""
    return {"pagination": {"limit": limit, "offset": offset, "total": total}}


def success(
    data: Any,
    status_code: int = status.HTTP_200_OK,
    meta: dict[str, Any] | None = None,
) -> JSONResponse:
    """Wrap a payload in the success envelope."""
    body: dict[str, Any] = {"data": data}
    if meta:
        body["meta"] = meta
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def created(data: Any, meta: dict[str, Any] | None = None) -> JSONResponse:
    return success(data, status.HTTP_201_CREATED, meta)


def no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the error envelope. Empty details are omitted."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_body(code, message, details)),
        headers=headers,
    )
