"""HTTP entry point for the GraphQL API.

:func:`create_app` builds the server from a :class:`ServerConfig`: CORS and
body-parsing error handling first, then the welcome, health and GraphQL
routes.  A module level ``app`` is created from the process configuration so
the service can be started with ``uvicorn apps.graphql_api.main:app`` or via
the ``graphql-api`` console script.
"""

from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import Body, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from apps.graphql_api import GraphQLService
from apps.graphql_api.cors import PermissiveCORSMiddleware
from apps.graphql_api.errors import client_error, register_error_handlers
from apps.graphql_api.schema import RootValue, build_schema
from lib.clients.deepseek import DeepSeekClient
from lib.config.server_loader import ServerConfig, load_server_config
from lib.contracts.graphql import GraphQLRequest, HealthStatus, Welcome
from lib.telemetry.logger import configure_logging, get_logger
from lib.utils.helpers import _utcnow_iso


logger = get_logger(__name__)


def build_root_value(config: ServerConfig) -> RootValue:
    ds = config.deepseek
    return RootValue(
        deepseek=DeepSeekClient(
            api_key=ds.api_key, base_url=ds.base_url, model=ds.model, timeout=ds.timeout
        ),
        models=list(ds.models),
    )


def log_startup(config: ServerConfig) -> None:
    base = f"http://localhost:{config.port}"
    logger.info("Server running on %s", base)
    logger.info("GraphQL endpoint: %s%s", base, config.graphql_path)
    logger.info("Health check: %s/health", base)
    if not config.deepseek.api_key:
        logger.warning("DEEPSEEK_API_KEY is not set; the chat field will return errors")


def create_app(config: ServerConfig | None = None) -> FastAPI:
    config = config or load_server_config()
    configure_logging(config.log_level)
    path = config.graphql_path

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_startup(config)
        yield

    app = FastAPI(title="GraphQL + DeepSeek API", lifespan=lifespan)
    app.state.config = config
    app.state.graphql = GraphQLService(
        schema=build_schema(),
        root_value=build_root_value(config),
        debug=config.development,
        timeout=config.execution_timeout,
    )
    app.add_middleware(PermissiveCORSMiddleware, allow_origins=config.cors_allow_origins)
    register_error_handlers(app)

    @app.get("/")
    async def welcome() -> Welcome:
        """Describe the available endpoints."""

        return Welcome(
            message="Welcome to the GraphQL + DeepSeek API",
            endpoints={"graphql": path, "health": "/health"},
            documentation=f"Send POST requests to {path} with GraphQL queries",
        )

    @app.get("/health")
    async def health() -> HealthStatus:
        return HealthStatus(status="ok", timestamp=_utcnow_iso())

    @app.post(path)
    async def graphql_post(
        request: Request, payload: GraphQLRequest | None = Body(default=None)
    ) -> JSONResponse:
        """Execute the query in the JSON body."""

        payload = payload or GraphQLRequest()
        if not payload.query:
            logger.warning("POST %s rejected: query is missing", path)
            return JSONResponse(status_code=400, content=client_error("Query is required"))

        status, body = await request.app.state.graphql.respond(payload)
        return JSONResponse(status_code=status, content=body)

    @app.get(path)
    async def graphql_get(
        request: Request,
        query: str | None = None,
        variables: str | None = None,
        operation_name: str | None = Query(default=None, alias="operationName"),
    ) -> JSONResponse:
        """Execute the query in the query string.

        Without a ``query`` parameter this answers with usage help rather
        than an error.
        """

        if not query:
            return JSONResponse(
                content={
                    "message": (
                        "GraphQL endpoint is ready. Provide a 'query' parameter "
                        "or POST a JSON body."
                    ),
                    "example": f"{path}?query={{ hello }}",
                }
            )

        status, body = await request.app.state.graphql.respond_to_get(
            query, variables, operation_name
        )
        return JSONResponse(status_code=status, content=body)

    return app


def serve(config: ServerConfig | None = None) -> None:
    """Load configuration and run the server until the process exits."""

    config = config or load_server_config()
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def main() -> None:
    serve()


load_dotenv()
app = create_app()


if __name__ == "__main__":
    main()
