"""Allow-all CORS policy."""

from __future__ import annotations

from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class PermissiveCORSMiddleware(CORSMiddleware):
    """:class:`CORSMiddleware` that answers every response.

    Preflight requests short-circuit with an empty ``204``.  Requests that
    carry no ``Origin`` header, which Starlette leaves untouched, still get
    ``Access-Control-Allow-Origin``.
    """

    def __init__(self, app: ASGIApp, allow_origins=("*",)) -> None:
        super().__init__(
            app,
            allow_origins=list(allow_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self.default_origin = "*" if "*" in allow_origins else None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or "origin" in Headers(scope=scope):
            await super().__call__(scope, receive, send)
            return
        if self.default_origin is None:
            await self.app(scope, receive, send)
            return

        async def send_with_origin(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.setdefault("Access-Control-Allow-Origin", self.default_origin)
            await send(message)

        await self.app(scope, receive, send_with_origin)

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            k: v
            for k, v in response.headers.items()
            if k not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)
