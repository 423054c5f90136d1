# src/graceful_shutdown_demo/clients.py

"""
Client wrapper for the Lambda Extensions API.

The Extensions API is a plain HTTP API served by the Lambda service on
`AWS_LAMBDA_RUNTIME_API`. This wrapper keeps the URL layout, headers and
error mapping in one place so the extension worker only deals with Python
values and our own exceptions.
"""

import logging
from typing import Any, Iterable

import requests

from .exceptions import ExtensionEventError, ExtensionRegistrationError

logger = logging.getLogger(__name__)

API_VERSION = "2020-01-01"
EXTENSION_NAME_HEADER = "Lambda-Extension-Name"
EXTENSION_ID_HEADER = "Lambda-Extension-Identifier"


class ExtensionsApiClient:
    """
    A thin wrapper over a `requests.Session` for the Extensions API endpoints.
    """

    def __init__(
        self,
        runtime_api: str,
        session: requests.Session | None = None,
        timeout_seconds: int = 5,
    ):
        """
        Initializes the ExtensionsApiClient.

        Args:
            runtime_api: The `host:port` from AWS_LAMBDA_RUNTIME_API.
            session: Optional session, injected by tests.
            timeout_seconds: Timeout for the register call. `next_event` is a
                long poll and never times out on the client side.
        """
        self._base_url = f"http://{runtime_api}/{API_VERSION}/extension"
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def register(self, name: str, events: Iterable[str] = ()) -> str:
        """
        Registers an extension and returns the identifier Lambda assigned to it.
        Must be called during the init phase.
        """
        try:
            response = self._session.post(
                f"{self._base_url}/register",
                headers={EXTENSION_NAME_HEADER: name},
                json={"events": list(events)},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(
                "Extensions API register call failed.",
                extra={"extension_name": name, "error": str(e)},
            )
            raise ExtensionRegistrationError(name) from e

        if not response.ok:
            logger.error(
                "Extensions API rejected registration.",
                extra={
                    "extension_name": name,
                    "status_code": response.status_code,
                    "body": response.text,
                },
            )
            raise ExtensionRegistrationError(name, status_code=response.status_code)

        extension_id = response.headers.get(EXTENSION_ID_HEADER)
        if not extension_id:
            raise ExtensionRegistrationError(name, status_code=response.status_code)

        logger.debug(
            "Extension registered.",
            extra={"extension_name": name, "extension_id": extension_id},
        )
        return extension_id

    def next_event(self, extension_id: str) -> dict[str, Any]:
        """
        Blocks until Lambda delivers the next event for this extension.
        """
        try:
            response = self._session.get(
                f"{self._base_url}/event/next",
                headers={EXTENSION_ID_HEADER: extension_id},
                timeout=None,
            )
        except requests.RequestException as e:
            raise ExtensionEventError("event/next") from e

        if not response.ok:
            raise ExtensionEventError("event/next", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ExtensionEventError("event/next", status_code=response.status_code) from e
