"""
The Lambda Adapter for the Graceful Shutdown Demo function.

This module is the main entry point for the AWS Lambda function. It is
responsible for:
1.  Initializing and configuring AWS Lambda Powertools (Logger, Tracer, Metrics).
2.  Installing the SIGTERM/SIGINT handlers that perform the graceful shutdown.
3.  Registering the no-op internal extension when no external extension
    layer is attached, so that Lambda delivers SIGTERM at all.
4.  Parsing API Gateway proxy events and answering with the hello payload.
"""

import pydantic
from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from .config import get_config
from .core import build_hello_payload, render_body
from .exceptions import InvalidRequestError, get_error_context
from .extension import NoOpExtension, start_internal_extension
from .schemas import ApiGatewayResponse, ApiGatewayResponseDict, parse_request
from .shutdown import GracefulShutdown

# --- Global & Reusable Components ---
CONFIG = get_config()

logger = Logger(service=CONFIG.service_name, level=CONFIG.log_level)
tracer = Tracer(service=CONFIG.service_name)
metrics = Metrics(
    namespace="GracefulShutdownDemo",
    service=CONFIG.service_name,
)

graceful_shutdown = GracefulShutdown(log=logger)
internal_extension: NoOpExtension | None = None


def _log_shutdown_state() -> None:
    logger.info(
        "Releasing resources before exit.",
        extra={
            "environment": CONFIG.environment,
            "extension_mode": CONFIG.shutdown_extension_mode,
        },
    )


def _stop_internal_extension() -> None:
    if internal_extension is not None:
        internal_extension.stop()


graceful_shutdown.add_cleanup_hook(_log_shutdown_state)
graceful_shutdown.add_cleanup_hook(_stop_internal_extension)
graceful_shutdown.install()

# Extensions MUST register during init, before the first invocation is handled.
if CONFIG.uses_internal_extension:
    internal_extension = start_internal_extension(
        runtime_api=CONFIG.runtime_api,
        name=CONFIG.extension_name,
        timeout_seconds=CONFIG.extension_http_timeout_seconds,
        log=logger,
    )


def _error_response(status_code: int, error: InvalidRequestError) -> ApiGatewayResponseDict:
    body = render_body({"error": error.message, "error_code": error.error_code})
    return ApiGatewayResponse.from_payload(status_code, body).to_lambda()


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict, context: LambdaContext) -> ApiGatewayResponseDict:
    """Main Lambda handler for API Gateway GET /hello requests."""
    metrics.add_dimension("environment", CONFIG.environment)

    try:
        request = parse_request(event)
        source_ip = request.source_ip
    except pydantic.ValidationError as e:
        errors = e.errors(include_url=False)
        metrics.add_metric(name="InvalidRequests", unit=MetricUnit.Count, value=1)
        logger.warning(
            "API Gateway event failed validation.",
            extra={"validation_errors": errors},
        )
        field = ".".join(str(part) for part in errors[0]["loc"]) or "event"
        return _error_response(400, InvalidRequestError(field))
    except InvalidRequestError as e:
        metrics.add_metric(name="InvalidRequests", unit=MetricUnit.Count, value=1)
        logger.warning("Rejected request.", extra={"error": get_error_context(e)})
        return _error_response(400, e)

    payload = build_hello_payload(source_ip, CONFIG.greeting_message)
    tracer.put_annotation(key="architecture", value=payload["architecture"])

    metrics.add_metric(name="HelloRequests", unit=MetricUnit.Count, value=1)
    logger.info(
        "Answered hello request.",
        extra={
            "source_ip": source_ip,
            "path": request.path,
            "http_method": request.http_method,
        },
    )

    return ApiGatewayResponse.from_payload(200, render_body(payload)).to_lambda()
