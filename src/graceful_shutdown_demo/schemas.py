# In src/graceful_shutdown_demo/schemas.py

from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidRequestError

# --- Static Type Hinting (for mypy and IDEs) ---


class ApiGatewayResponseDict(TypedDict):
    """
    A TypedDict representing the proxy integration response returned to API Gateway.
    """

    statusCode: int
    body: str


# Functional syntax because the keys contain spaces.
HelloPayload = TypedDict(
    "HelloPayload",
    {
        "message": str,
        "source ip": str,
        "architecture": str,
        "operating system": str,
    },
)


# --- Runtime Validation (using Pydantic) ---


class RequestIdentity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source_ip: str | None = Field(None, alias="sourceIp")


class RequestContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    identity: RequestIdentity = Field(default_factory=RequestIdentity)
    request_id: str | None = Field(None, alias="requestId")
    stage: str | None = None


class ApiGatewayProxyRequest(BaseModel):
    """
    Pydantic model for the parts of an API Gateway REST proxy event the handler reads.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    path: str | None = None
    http_method: str | None = Field(None, alias="httpMethod")
    request_context: RequestContext = Field(
        default_factory=RequestContext, alias="requestContext"
    )

    @property
    def source_ip(self) -> str:
        ip = self.request_context.identity.source_ip
        if not ip or not ip.strip():
            raise InvalidRequestError("requestContext.identity.sourceIp")
        return ip


class ApiGatewayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode", ge=100, le=599)
    body: str

    def to_lambda(self) -> ApiGatewayResponseDict:
        return {"statusCode": self.status_code, "body": self.body}

    @classmethod
    def from_payload(cls, status_code: int, body: str) -> "ApiGatewayResponse":
        return cls(statusCode=status_code, body=body)


def parse_request(event: dict[str, Any]) -> ApiGatewayProxyRequest:
    return ApiGatewayProxyRequest.model_validate(event)
