# tests/unit/test_app.py

import importlib
import json
from unittest.mock import MagicMock, patch

import pytest

from graceful_shutdown_demo.config import get_config


@pytest.fixture(scope="module")
def app_module():
    """
    Imports the handler module once. Importing installs the SIGTERM/SIGINT
    handlers, so put pytest's own handlers back afterwards.
    """
    get_config.cache_clear()
    module = importlib.import_module("graceful_shutdown_demo.app")
    yield module
    module.graceful_shutdown.restore()


def test_handler_returns_hello_payload(app_module, api_gateway_event, lambda_context):
    response = app_module.handler(api_gateway_event, lambda_context)

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["message"] == "hello python"
    assert body["source ip"] == "203.0.113.10"
    assert set(body) == {"message", "source ip", "architecture", "operating system"}


def _emf_blobs(output: str) -> list[dict]:
    """Returns the CloudWatch Embedded Metric Format objects printed to stdout."""
    blobs = []
    for line in output.splitlines():
        try:
            parsed = json.loads(line)
        except ValueError:
            continue
        if isinstance(parsed, dict) and "_aws" in parsed:
            blobs.append(parsed)
    return blobs


def _metric_blob(output: str, metric_name: str) -> dict:
    matches = [blob for blob in _emf_blobs(output) if metric_name in blob]
    assert matches, f"no EMF output contained {metric_name}"
    return matches[-1]


def test_handler_emits_request_metric(app_module, api_gateway_event, lambda_context, capsys):
    app_module.handler(api_gateway_event, lambda_context)

    blob = _metric_blob(capsys.readouterr().out, "HelloRequests")
    directive = blob["_aws"]["CloudWatchMetrics"][0]
    assert directive["Namespace"] == "GracefulShutdownDemo"
    assert "environment" in directive["Dimensions"][0]
    assert blob["environment"] == "test"


def test_handler_ignores_null_headers_and_query_values(
    app_module, api_gateway_event, lambda_context
):
    api_gateway_event["headers"]["X-Empty"] = None
    api_gateway_event["queryStringParameters"] = {"debug": None}
    api_gateway_event["requestContext"]["identity"]["userAgent"] = None

    response = app_module.handler(api_gateway_event, lambda_context)

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["source ip"] == "203.0.113.10"


def test_handler_rejects_missing_source_ip(
    app_module, api_gateway_event, lambda_context, capsys
):
    del api_gateway_event["requestContext"]["identity"]["sourceIp"]

    response = app_module.handler(api_gateway_event, lambda_context)

    assert response["statusCode"] == 400
    body = json.loads(response["body"])
    assert body["error_code"] == "INVALID_REQUEST"
    assert "sourceIp" in body["error"]
    blob = _metric_blob(capsys.readouterr().out, "InvalidRequests")
    assert "HelloRequests" not in blob


def test_handler_rejects_malformed_event(app_module, lambda_context, capsys):
    response = app_module.handler({"requestContext": ["not", "a", "dict"]}, lambda_context)

    assert response["statusCode"] == 400
    body = json.loads(response["body"])
    assert body["error_code"] == "INVALID_REQUEST"
    assert "requestContext" in body["error"]
    _metric_blob(capsys.readouterr().out, "InvalidRequests")


def test_unexpected_errors_propagate(app_module, api_gateway_event, lambda_context):
    with patch.object(app_module, "build_hello_payload", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError, match="boom"):
            app_module.handler(api_gateway_event, lambda_context)


def test_import_installs_shutdown_handlers(app_module):
    assert not app_module.graceful_shutdown.shutting_down
    assert app_module.internal_extension is None


def test_shutdown_hooks_stop_the_internal_extension(app_module):
    extension = MagicMock()
    with patch.object(app_module, "internal_extension", extension):
        app_module._stop_internal_extension()

    extension.stop.assert_called_once()


def test_internal_mode_registers_extension_during_init(app_module, monkeypatch):
    monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "internal")
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")
    monkeypatch.setenv("EXTENSION_NAME", "no-op")
    get_config.cache_clear()
    app_module.graceful_shutdown.restore()

    try:
        with patch(
            "graceful_shutdown_demo.extension.start_internal_extension"
        ) as mock_start:
            reloaded = importlib.reload(app_module)

        mock_start.assert_called_once_with(
            runtime_api="127.0.0.1:9001",
            name="no-op",
            timeout_seconds=5,
            log=reloaded.logger,
        )
        assert reloaded.internal_extension is mock_start.return_value
    finally:
        app_module.graceful_shutdown.restore()
        monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "external")
        get_config.cache_clear()
        importlib.reload(app_module)
