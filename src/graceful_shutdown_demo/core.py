"""
Core business logic for the hello endpoint.

Kept free of Powertools and AWS imports so it can be unit-tested in isolation.
"""

import json
import platform

from .schemas import HelloPayload


def get_architecture() -> str:
    """Machine architecture of the execution environment, e.g. 'aarch64' on arm64 Lambda."""
    return platform.machine()


def get_operating_system() -> str:
    return platform.system().lower()


def build_hello_payload(source_ip: str, message: str) -> HelloPayload:
    """
    Builds the response payload for a single request.

    Args:
        source_ip: The caller's IP as reported by API Gateway.
        message: The greeting to echo back.
    """
    return {
        "message": message,
        "source ip": source_ip,
        "architecture": get_architecture(),
        "operating system": get_operating_system(),
    }


def render_body(payload: dict) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)
