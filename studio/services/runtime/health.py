"""Single-shot liveness probe for the local runtime."""

from urllib.parse import urlparse

import httpx
import structlog

logger = structlog.get_logger()

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "::1"})


def is_local_host(host: str) -> bool:
    """True when the runtime URL points at this machine."""
    try:
        hostname = (urlparse(host).hostname or "").lower()
    except ValueError:
        return False
    return hostname in LOCAL_HOSTNAMES


class HealthProbe:
    """Answers one question: is the runtime's status endpoint answering right now?

    Every failure (refused connection, timeout, non-2xx, garbage) is the same
    ``False``. Callers only need a boolean gate.
    """

    def __init__(self, host: str, http_client: httpx.AsyncClient, timeout: float = 1.5):
        self.host = host.rstrip("/")
        self._client = http_client
        self._timeout = timeout

    async def ping(self, host: str | None = None, timeout: float | None = None) -> bool:
        base = (host or self.host).rstrip("/")
        try:
            response = await self._client.get(f"{base}/api/tags", timeout=timeout or self._timeout)
            return response.is_success
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("runtime_ping_failed", host=base, error=str(e))
            return False
