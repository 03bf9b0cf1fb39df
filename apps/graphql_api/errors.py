"""Error shaping for the GraphQL HTTP surface."""

from __future__ import annotations

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from lib.contracts.graphql import ErrorDetail, ErrorResponse
from lib.telemetry.logger import get_logger


logger = get_logger(__name__)


def error_payload(exc: BaseException, debug: bool = False) -> Dict[str, Any]:
    """Return ``{"errors": [{"message", "stack"?}]}`` for ``exc``.

    ``stack`` is only present when ``debug`` is set.
    """

    detail = ErrorDetail(
        message=str(exc) or exc.__class__.__name__,
        stack=(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            if debug
            else None
        ),
    )
    return ErrorResponse(errors=[detail]).to_body()


def client_error(message: str) -> Dict[str, Any]:
    return ErrorResponse(errors=[ErrorDetail(message=message)]).to_body()


def _validation_message(exc: RequestValidationError) -> str:
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return "Invalid JSON body"
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = _validation_message(exc)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content=client_error(message))


def allowed_methods(request: Request) -> list[str]:
    """Methods of every route registered on the request path."""

    methods: set[str] = set()
    for route in request.app.router.routes:
        route_methods = getattr(route, "methods", None)
        if not route_methods:
            continue
        match, _ = route.matches(request.scope)
        if match in (Match.FULL, Match.PARTIAL):
            methods.update(route_methods)
    return sorted(methods)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code != 405:
        return await http_exception_handler(request, exc)
    # Starlette only reports the methods of the first route matching the path.
    allow = ", ".join(allowed_methods(request))
    if request.method == "OPTIONS":
        return Response(status_code=200, headers={"Allow": allow})
    return JSONResponse(
        status_code=405, content={"detail": exc.detail}, headers={"Allow": allow}
    )


def register_error_handlers(app: FastAPI) -> None:
    """Report unparseable or mistyped request bodies as 400, not 422.

    A known path requested with an unregistered method gets ``405`` with the
    full ``Allow`` list; plain ``OPTIONS`` gets that list with ``200``.
    """

    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)


__all__ = ["error_payload", "client_error", "register_error_handlers"]
