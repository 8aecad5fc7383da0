"""Model-hub data sources and record normalization for the catalog.

The hub exposes several listing shapes (and, as a last resort, an HTML page
with an embedded data blob). None of them is a stable contract, so every
parser here is tolerant: unknown shapes yield no records rather than errors.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from studio.schemas.catalog import CatalogEntry, CatalogSource
from studio.services.catalog.sizes import parse_size, size_from_tag

logger = structlog.get_logger()

DEFAULT_DESCRIPTION = "Ollama model"

_NEXT_DATA_RE = re.compile(
    r"<script[^>]+id=[\"']__NEXT_DATA__[\"'][^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL
)
_META_DESCRIPTION_RE = re.compile(
    r"<meta[^>]+name=[\"']description[\"'][^>]+content=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE
)
_JSON_LD_RE = re.compile(
    r"<script[^>]+type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL
)
_COUNT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kmb])?\s*$", re.IGNORECASE)
_COUNT_SUFFIX = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}

MAX_SEARCH_DEPTH = 32


class HubClient:
    """Thin HTTP wrapper around the public model hub."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient,
        user_agent: str,
        timeout: float = 15.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client
        self._user_agent = user_agent
        self._timeout = timeout

    async def get_json(self, path: str, params: dict | None = None) -> Any:
        response = await self._client.get(
            f"{self.base_url}{path}",
            params=params,
            headers={"Accept": "application/json", "User-Agent": self._user_agent},
            timeout=self._timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.json()

    async def get_html(self, path: str) -> str:
        response = await self._client.get(
            f"{self.base_url}{path}",
            headers={
                "Accept": "text/html",
                "User-Agent": self._user_agent,
                "Referer": f"{self.base_url}/",
            },
            timeout=self._timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.text


# ── Parsing helpers ──────────────────────────────────────────────────────────


def _looks_like_models(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, dict) and ("name" in item or "model" in item) for item in value)
    )


def find_models_array(obj: Any, _depth: int = 0) -> list[dict] | None:
    """Depth-first search for the first list whose elements all look like model records."""
    if _depth > MAX_SEARCH_DEPTH:
        return None
    if _looks_like_models(obj):
        return obj
    if isinstance(obj, dict):
        children = obj.values()
    elif isinstance(obj, list):
        children = obj
    else:
        return None
    for child in children:
        found = find_models_array(child, _depth + 1)
        if found:
            return found
    return None


def extract_next_data(html: str) -> Any | None:
    match = _NEXT_DATA_RE.search(html)
    if not match:
        return None
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError:
        return None


def extract_meta_description(html: str) -> str | None:
    match = _META_DESCRIPTION_RE.search(html)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def extract_json_ld_description(html: str) -> str | None:
    match = _JSON_LD_RE.search(html)
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        return None
    description = data.get("description") if isinstance(data, dict) else None
    if isinstance(description, str) and description.strip():
        return description.strip()
    return None


def records_from_payload(payload: Any) -> list[dict]:
    """Accept ``{"models": [...]}`` or a bare list; anything else is empty."""
    if isinstance(payload, dict):
        payload = payload.get("models")
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def _count(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str):
        match = _COUNT_RE.match(value.replace(",", ""))
        if match:
            multiplier = _COUNT_SUFFIX.get((match.group(2) or "").lower(), 1)
            return int(float(match.group(1)) * multiplier)
    return 0


def record_name(item: dict) -> str:
    return str(item.get("name") or item.get("model") or "").strip()


def record_description(item: dict) -> str:
    details = item.get("details") if isinstance(item.get("details"), dict) else {}
    return str(item.get("description") or details.get("description") or "").strip()


def normalize_record(item: dict, source: CatalogSource) -> CatalogEntry | None:
    name = record_name(item)
    if not name:
        return None
    details = item.get("details") if isinstance(item.get("details"), dict) else {}

    size = parse_size(item.get("size"))
    if size is None:
        size = parse_size(details.get("parameter_size"))
    if size is None:
        size = size_from_tag(name)

    return CatalogEntry(
        id=name,
        description=record_description(item) or DEFAULT_DESCRIPTION,
        size_bytes=size,
        likes=_count(item.get("likes")),
        downloads=_count(item.get("downloads") or item.get("pull_count")),
        works_locally=True,
        source=source,
    )


def normalize_records(items: list[dict], source: CatalogSource) -> list[CatalogEntry]:
    entries = []
    for item in items:
        entry = normalize_record(item, source)
        if entry is not None:
            entries.append(entry)
    return entries


# ── Tiers ────────────────────────────────────────────────────────────────────


class CatalogTier(ABC):
    name: str = "tier"
    source: CatalogSource = CatalogSource.FALLBACK

    def __init__(self, hub: HubClient):
        self._hub = hub

    @abstractmethod
    async def fetch(self) -> list[dict]:
        """Raw model records from this source; may raise on transport errors."""
        ...


class TagsTier(CatalogTier):
    name = "tags"
    source = CatalogSource.PRIMARY

    async def fetch(self) -> list[dict]:
        return records_from_payload(await self._hub.get_json("/api/tags"))


class ModelsTier(CatalogTier):
    name = "models"

    async def fetch(self) -> list[dict]:
        return records_from_payload(await self._hub.get_json("/api/models"))


class LibraryScrapeTier(CatalogTier):
    name = "library-scrape"

    async def fetch(self) -> list[dict]:
        html = await self._hub.get_html("/library")
        blob = extract_next_data(html)
        if blob is None:
            logger.info("catalog_scrape_no_data_blob")
            return []
        return [item for item in find_models_array(blob) or [] if isinstance(item, dict)]


class SearchTier(CatalogTier):
    """The hub's search endpoint; without a query it returns a partial top list."""

    name = "search"

    def __init__(self, hub: HubClient, query: str = ""):
        super().__init__(hub)
        self._query = query

    async def fetch(self) -> list[dict]:
        params = {"q": self._query} if self._query else None
        return records_from_payload(await self._hub.get_json("/api/search", params=params))


def default_tiers(hub: HubClient) -> list[CatalogTier]:
    return [TagsTier(hub), ModelsTier(hub), LibraryScrapeTier(hub), SearchTier(hub)]
