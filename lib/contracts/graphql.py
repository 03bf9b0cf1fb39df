"""Request and response models for the GraphQL HTTP surface."""
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class GraphQLRequest(BaseModel):
    """Parameters of a single GraphQL invocation.

    Built from the JSON body for ``POST`` and from the query string for
    ``GET``.  Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    query: str | None = None
    variables: Dict[str, Any] | None = None
    operation_name: str | None = Field(default=None, alias="operationName")


class ErrorDetail(BaseModel):
    message: str
    stack: str | None = None


class ErrorResponse(BaseModel):
    errors: List[ErrorDetail] = Field(default_factory=list)

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class HealthStatus(BaseModel):
    status: str = "ok"
    timestamp: str


class Welcome(BaseModel):
    message: str
    endpoints: Dict[str, str]
    documentation: str
