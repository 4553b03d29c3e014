from __future__ import annotations

from typing import Any, Mapping, Optional

from starlette.responses import JSONResponse, Response

from svc_content.exceptions import ContentError


def bad_request(message: str = "") -> Response:
    return Response(message, status_code=400)


def unauthorized() -> Response:
    return Response(status_code=401)


def not_found() -> Response:
    return Response(status_code=404)


def no_content() -> Response:
    return Response(status_code=204)


def success(ok: Any) -> Response:
    return Response(status_code=200 if ok else 500)


def json(payload: Any, headers: Optional[Mapping[str, Optional[str]]] = None, status_code: int = 200) -> JSONResponse:
    clean = {k: v for k, v in (headers or {}).items() if v is not None}
    return JSONResponse(payload, status_code=status_code, headers=clean)


def error(exc: ContentError) -> JSONResponse:
    content: dict[str, Any] = {"error": type(exc).__name__.removesuffix("Error") or "Error"}
    if exc.detail:
        content["detail"] = exc.detail
    return JSONResponse(content, status_code=exc.status_code)


def conflict(exc: ContentError) -> JSONResponse:
    """409 telling the caller to confirm with ``overwrite=true``."""
    return JSONResponse(
        {"error": "Conflict", "detail": exc.detail, "confirm": "overwrite"},
        status_code=409,
    )
