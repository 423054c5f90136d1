"""
A no-op internal Lambda extension.

Registering any extension makes Lambda send SIGTERM to the function process
before shutting the execution environment down. When no external extension
(such as the Lambda Insights layer) is attached, the function registers this
one itself. It subscribes to no events and only keeps the long poll against
the Extensions API alive on a daemon thread.
"""

import logging
import threading
from typing import Any, Iterable

from .clients import ExtensionsApiClient
from .exceptions import ExtensionError, get_error_context, is_retryable_error

logger = logging.getLogger(__name__)

SHUTDOWN_EVENT = "SHUTDOWN"
RETRY_BACKOFF_SECONDS = 0.1
MAX_RETRY_BACKOFF_SECONDS = 5.0
MAX_CONSECUTIVE_RETRIES = 8


def retry_delay(attempt: int, base_seconds: float, cap_seconds: float) -> float:
    """Exponential back-off: base, 2*base, 4*base, ... never above cap."""
    return min(cap_seconds, base_seconds * (2 ** (attempt - 1)))


class NoOpExtension:
    def __init__(
        self,
        client: ExtensionsApiClient,
        name: str = "no-op",
        events: Iterable[str] = (),
        retry_backoff_seconds: float = RETRY_BACKOFF_SECONDS,
        max_retry_backoff_seconds: float = MAX_RETRY_BACKOFF_SECONDS,
        max_consecutive_retries: int = MAX_CONSECUTIVE_RETRIES,
        log: Any = None,
    ):
        """
        Args:
            client: Extensions API client.
            name: Extension name, unique within the function.
            events: Event types to subscribe to. Internal extensions need none.
            retry_backoff_seconds: First delay after a retryable poll error.
            max_retry_backoff_seconds: Upper bound for the growing delay.
            max_consecutive_retries: Failed polls in a row before the loop gives up.
            log: Logger to report to. Accepts a Powertools Logger or a stdlib logger.
        """
        self._client = client
        self._name = name
        self._events = tuple(events)
        self._retry_backoff_seconds = retry_backoff_seconds
        self._max_retry_backoff_seconds = max_retry_backoff_seconds
        self._max_consecutive_retries = max_consecutive_retries
        self._log = log or logger
        self._extension_id: str | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def extension_id(self) -> str | None:
        return self._extension_id

    @property
    def registered(self) -> bool:
        return self._extension_id is not None

    def register(self) -> str:
        """
        Registers with the Extensions API. Has to run during init, before the
        first invocation; raises ExtensionRegistrationError otherwise.
        """
        self._extension_id = self._client.register(self._name, self._events)
        self._log.info(
            "Internal extension registered.",
            extra={"extension_name": self._name, "extension_id": self._extension_id},
        )
        return self._extension_id

    def start(self) -> threading.Thread:
        if not self.registered:
            self.register()
        self._thread = threading.Thread(
            target=self.run, name=f"extension-{self._name}", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        """
        Polls for events until SHUTDOWN, `stop()`, a non-retryable error, or
        too many retryable errors in a row.
        """
        if self._extension_id is None:
            raise RuntimeError("Extension must be registered before it runs.")

        failures = 0
        while not self._stop.is_set():
            try:
                event = self._client.next_event(self._extension_id)
            except ExtensionError as e:
                failures += 1
                if not is_retryable_error(e) or failures > self._max_consecutive_retries:
                    self._log.error(
                        "Extension event loop stopped.",
                        extra={"error": get_error_context(e), "failures": failures},
                    )
                    return
                delay = retry_delay(
                    failures,
                    self._retry_backoff_seconds,
                    self._max_retry_backoff_seconds,
                )
                self._log.warning(
                    "Extension event poll failed, retrying.",
                    extra={
                        "error": get_error_context(e),
                        "attempt": failures,
                        "delay_seconds": delay,
                    },
                )
                self._stop.wait(delay)
                continue

            failures = 0
            event_type = event.get("eventType")
            self._log.debug(
                "Extension received event.",
                extra={"extension_name": self._name, "event_type": event_type},
            )
            if event_type == SHUTDOWN_EVENT:
                self._log.info(
                    "Extension received SHUTDOWN.",
                    extra={"shutdown_reason": event.get("shutdownReason")},
                )
                return


def start_internal_extension(
    runtime_api: str, name: str = "no-op", timeout_seconds: int = 5, log: Any = None
) -> NoOpExtension:
    """Creates, registers and starts the no-op extension."""
    extension = NoOpExtension(
        ExtensionsApiClient(runtime_api, timeout_seconds=timeout_seconds),
        name=name,
        log=log,
    )
    extension.start()
    return extension
