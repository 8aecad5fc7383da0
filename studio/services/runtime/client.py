"""HTTP client for the local Ollama runtime API."""

import json
from collections.abc import AsyncIterator

import httpx
import structlog

logger = structlog.get_logger()


class RuntimeClient:
    def __init__(self, base_url: str, http_client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=120.0, write=5.0, pool=5.0)
        )

    async def list_installed(self) -> list[str] | None:
        """Names of models in the runtime's local store.

        Returns None when the store cannot be enumerated at all (runtime down,
        error status, malformed body) so callers can tell "empty" from "unknown".
        """
        try:
            response = await self._client.get(f"{self.base_url}/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("runtime_list_failed", host=self.base_url, error=str(e))
            return None

        items = data.get("models") if isinstance(data, dict) else None
        if not isinstance(items, list):
            return None
        names = {
            item["name"]
            for item in items
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        }
        return sorted(names)

    async def installed_set(self) -> frozenset[str]:
        """Snapshot of installed model names; empty when unavailable."""
        names = await self.list_installed()
        return frozenset(names or ())

    async def delete_model(self, name: str) -> bool:
        try:
            response = await self._client.request(
                "DELETE",
                f"{self.base_url}/api/delete",
                json={"name": name},
            )
        except httpx.HTTPError as e:
            logger.warning("runtime_delete_failed", model=name, error=str(e))
            return False
        if not response.is_success:
            logger.warning("runtime_delete_rejected", model=name, status=response.status_code)
            return False
        return True

    async def stream_pull(self, name: str) -> AsyncIterator[dict]:
        """Yield each NDJSON progress record from ``POST /api/pull``.

        Lines that fail to parse are skipped. Transport errors propagate to the
        caller, which decides how to report them.
        """
        url = f"{self.base_url}/api/pull"
        async with self._client.stream(
            "POST", url, json={"name": name, "stream": True}, timeout=httpx.Timeout(10.0, read=None)
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("pull_record_unparseable", model=name, line=line[:200])
                    continue
                if isinstance(record, dict):
                    yield record

    async def version(self) -> str | None:
        try:
            response = await self._client.get(f"{self.base_url}/api/version")
            if response.status_code == 200:
                return response.json().get("version")
        except (httpx.HTTPError, ValueError):
            pass
        return None

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()
