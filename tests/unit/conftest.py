"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import copy
import json
import os
import types
import uuid
from pathlib import Path

import pytest

# app.py reads its configuration at import time, and test modules are imported
# during collection, before any fixture runs.
os.environ.setdefault("SERVICE_NAME", "graceful-shutdown-demo-test")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SHUTDOWN_EXTENSION_MODE", "external")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "GracefulShutdownDemo")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def _env_vars():
    """
    Ensures a deterministic environment for every test run.
    Overwrite *only* the variables needed by the handler.
    """
    original = os.environ.copy()
    os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "graceful-shutdown-demo-test")
    os.environ.setdefault("POWERTOOLS_LOG_LEVEL", "INFO")
    yield
    os.environ.clear()
    os.environ.update(original)


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


# ---------- Minimal, realistic dummy events ---------- #
@pytest.fixture(scope="session")
def _sample_event() -> dict:
    with open(PROJECT_ROOT / "events" / "hello.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def api_gateway_event(_sample_event) -> dict:
    """A REST API proxy event for GET /hello, as `sam local invoke` would send it."""
    return copy.deepcopy(_sample_event)


@pytest.fixture
def lambda_context():
    """A small stand-in for the LambdaContext object."""
    return types.SimpleNamespace(
        function_name="graceful-shutdown-python-external-extension",
        function_version="$LATEST",
        memory_limit_in_mb=128,
        aws_request_id="req-" + uuid.uuid4().hex,
        invoked_function_arn="arn:aws:lambda:eu-west-1:000000000000:function:dummy",
        log_group_name="/aws/lambda/dummy",
        log_stream_name="2026/10/18/[$LATEST]dummy",
        get_remaining_time_in_millis=lambda: 3000,
    )
