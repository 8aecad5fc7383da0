"""Human-readable status feeds used by long-running operations."""

from collections.abc import Callable

import structlog

logger = structlog.get_logger()

StatusCallback = Callable[[str], None]


def notify(on_status: StatusCallback | None, message: str, **context) -> None:
    """Log a status line and forward it to the caller's callback, if any."""
    logger.info("status", message=message, **context)
    if on_status is None:
        return
    try:
        on_status(message)
    except Exception as e:
        # A broken UI callback must not abort the operation it is observing.
        logger.warning("status_callback_failed", error=str(e))


class StatusLog:
    """Callback that records every status line; used by the HTTP and CLI layers."""

    def __init__(self, echo: StatusCallback | None = None):
        self.lines: list[str] = []
        self._echo = echo

    def __call__(self, message: str) -> None:
        self.lines.append(message)
        if self._echo:
            self._echo(message)
