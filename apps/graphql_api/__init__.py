"""GraphQL HTTP service.

:class:`GraphQLService` sits between the HTTP routes and the GraphQL engine.
It hands the invocation parameters to :meth:`strawberry.Schema.execute`
together with the opaque root value, and turns the outcome into a status code
and JSON body:

* a result, with or without ``errors``, is returned with ``200``;
* an exception raised while executing is returned with ``500`` and an
  ``errors`` list carrying the message (plus the stack in debug mode).

Deciding whether a query was supplied at all is left to the routes, since
``GET`` and ``POST`` answer that case differently.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import strawberry

from lib.contracts.graphql import GraphQLRequest
from lib.telemetry.logger import get_logger

from .errors import error_payload


logger = get_logger(__name__)


class ExecutionTimeout(RuntimeError):
    pass


def parse_variables(text: str | None) -> Dict[str, Any] | None:
    """Decode the JSON ``variables`` query string parameter.

    Invalid JSON propagates as :class:`json.JSONDecodeError`.
    """

    if not text:
        return None
    value = json.loads(text)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError("Variables must be a JSON object")
    return value


@dataclass
class GraphQLService:
    schema: strawberry.Schema
    root_value: Any = None
    debug: bool = False
    timeout: float | None = None

    async def execute(self, request: GraphQLRequest) -> Dict[str, Any]:
        """Run ``request`` and serialise the execution result."""

        call = self.schema.execute(
            request.query,
            variable_values=request.variables,
            operation_name=request.operation_name,
            root_value=self.root_value,
        )
        if self.timeout is None:
            result = await call
        else:
            try:
                result = await asyncio.wait_for(call, self.timeout)
            except asyncio.TimeoutError:
                raise ExecutionTimeout(
                    f"GraphQL execution timed out after {self.timeout:g}s"
                ) from None

        body: Dict[str, Any] = {}
        if result.errors:
            body["errors"] = [err.formatted for err in result.errors]
        # Parse and validation errors carry no path; "data" is omitted only then.
        executed = not result.errors or any(
            err.path is not None for err in result.errors
        )
        if result.data is not None or executed:
            body["data"] = result.data
        if result.extensions:
            body["extensions"] = result.extensions
        return body

    async def respond(self, request: GraphQLRequest) -> Tuple[int, Dict[str, Any]]:
        try:
            return 200, await self.execute(request)
        except Exception as e:
            logger.exception("GraphQL execution failed: %s", e)
            return 500, error_payload(e, debug=self.debug)

    async def respond_to_get(
        self, query: str, variables: str | None, operation_name: str | None
    ) -> Tuple[int, Dict[str, Any]]:
        """Same as :meth:`respond`, but ``variables`` is still JSON text.

        A malformed ``variables`` string is reported through the 500 path.
        """

        try:
            request = GraphQLRequest(
                query=query,
                variables=parse_variables(variables),
                operation_name=operation_name,
            )
        except ValueError as e:
            logger.exception("GraphQL variables could not be parsed: %s", e)
            return 500, error_payload(e, debug=self.debug)
        return await self.respond(request)


__all__ = ["GraphQLService", "ExecutionTimeout", "parse_variables"]
