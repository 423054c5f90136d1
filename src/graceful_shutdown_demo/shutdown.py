"""
Graceful shutdown handling for the Lambda execution environment.

Lambda sends SIGTERM to the runtime process before it tears the execution
environment down, but only when at least one extension is registered (either
an external one such as the Lambda Insights layer, or the internal no-op
extension in `extension.py`). The process then has up to 500ms to clean up.

SIGINT is handled the same way so the behaviour can be reproduced locally
with Ctrl+C.
"""

import logging
import signal
from types import FrameType
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)

CleanupHook = Callable[[], None]

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


class GracefulShutdown:
    """
    Runs cleanup hooks and exits when a termination signal arrives.
    """

    def __init__(self, log: Any = None, exit_code: int = 0):
        """
        Args:
            log: Logger to write the shutdown sequence to. Accepts a Powertools
                Logger or a stdlib logger.
            exit_code: Status the process exits with once cleanup has finished.
        """
        self._log = log or logger
        self._exit_code = exit_code
        self._hooks: list[CleanupHook] = []
        self._previous_handlers: dict[int, Any] = {}
        self._shutting_down = False

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def add_cleanup_hook(self, hook: CleanupHook) -> None:
        self._hooks.append(hook)

    def install(self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS) -> None:
        """Registers `handle` for each signal, remembering the previous handler."""
        for sig in signals:
            self._previous_handlers[sig] = signal.signal(sig, self.handle)
            self._log.debug("Installed shutdown handler", extra={"signal": sig.name})

    def restore(self) -> None:
        """Puts back whatever handlers were active before `install`."""
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._previous_handlers.clear()

    def handle(self, signum: int, frame: FrameType | None) -> None:
        if self._shutting_down:
            # A second signal while hooks are still running; let them finish.
            return
        self._shutting_down = True

        name = signal.Signals(signum).name
        self._log.info(f"[runtime] {name} received")
        self._log.info("[runtime] Graceful shutdown in progress ...")
        self._run_hooks()
        self._log.info("[runtime] Graceful shutdown completed")
        raise SystemExit(self._exit_code)

    def _run_hooks(self) -> None:
        for hook in self._hooks:
            try:
                hook()
            except Exception:
                # One failing hook must not stop the others or the exit.
                self._log.exception(
                    "Cleanup hook failed during shutdown.",
                    extra={"hook": getattr(hook, "__name__", repr(hook))},
                )
