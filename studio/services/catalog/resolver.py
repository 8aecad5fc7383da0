"""Resolves the browsable model catalog through an ordered chain of sources."""

import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import quote

import httpx
import structlog

from studio.schemas.catalog import CatalogEntry, CatalogSource
from studio.services.catalog.sources import (
    CatalogTier,
    HubClient,
    SearchTier,
    default_tiers,
    extract_json_ld_description,
    extract_meta_description,
    normalize_records,
    record_name,
    records_from_payload,
)
from studio.services.catalog.static_catalog import static_entries

logger = structlog.get_logger()

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_DIGITS_RE = re.compile(r"\d+")
_ID_SEPARATORS_RE = re.compile(r"[:._-]")


def _normalize(text: str) -> str:
    return _NON_ALNUM_RE.sub("", text.lower())


def dedupe(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Drop repeated ids; the first occurrence wins."""
    seen: set[str] = set()
    unique = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(entry)
    return unique


class QueryMatcher:
    """Conjunctive, digit-tolerant substring match over an entry's searchable fields.

    Every whitespace-separated token must appear in at least one normalized
    field, either as-is or with its digits removed, so ``"llama 3"`` finds
    ``llama3:8b``. An empty query matches everything.
    """

    def __init__(self, query: str):
        self.query = (query or "").strip()
        self._tokens: list[tuple[str, str]] = []
        for raw in self.query.split():
            token = _normalize(raw)
            if token:
                self._tokens.append((token, _DIGITS_RE.sub("", token)))

    @property
    def empty(self) -> bool:
        return not self._tokens

    @staticmethod
    def _haystacks(entry: CatalogEntry) -> list[str]:
        base = entry.id.split(":", 1)[0]
        fields = [entry.id, base, _ID_SEPARATORS_RE.sub(" ", entry.id), entry.description]
        return [_normalize(field) for field in fields]

    def matches(self, entry: CatalogEntry) -> bool:
        if self.empty:
            return True
        haystacks = self._haystacks(entry)
        for token, without_digits in self._tokens:
            if any(token in hay for hay in haystacks):
                continue
            if without_digits and any(without_digits in hay for hay in haystacks):
                continue
            return False
        return True

    def filter(self, entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
        return [entry for entry in entries if self.matches(entry)]


@dataclass
class _CachedCatalog:
    entries: tuple[CatalogEntry, ...]
    source: CatalogSource
    expires_at: float


class CatalogResolver:
    def __init__(
        self,
        hub: HubClient,
        tiers: list[CatalogTier] | None = None,
        static: Callable[[], list[CatalogEntry]] = static_entries,
        cache_ttl: float = 300.0,
        default_limit: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._hub = hub
        self._tiers = tiers if tiers is not None else default_tiers(hub)
        self._static = static
        self._cache_ttl = cache_ttl
        self._default_limit = default_limit
        self._clock = clock
        self._cache: _CachedCatalog | None = None

    def invalidate(self) -> None:
        self._cache = None

    async def _fetch_tier(self, tier: CatalogTier) -> list[CatalogEntry]:
        try:
            records = await tier.fetch()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("catalog_tier_failed", tier=tier.name, error=str(e))
            return []
        entries = dedupe(normalize_records(records, tier.source))
        logger.info("catalog_tier_fetched", tier=tier.name, records=len(records), entries=len(entries))
        return entries

    async def resolve(self) -> tuple[list[CatalogEntry], CatalogSource]:
        """Walk the tiers; the first one with usable entries is used whole."""
        now = self._clock()
        if self._cache is not None and now < self._cache.expires_at:
            return list(self._cache.entries), self._cache.source

        entries: list[CatalogEntry] = []
        source = CatalogSource.STATIC
        for tier in self._tiers:
            entries = await self._fetch_tier(tier)
            if entries:
                source = tier.source
                break
        else:
            logger.warning("catalog_offline_using_snapshot")
            entries = dedupe(self._static())
            source = CatalogSource.STATIC

        if self._cache_ttl > 0:
            self._cache = _CachedCatalog(tuple(entries), source, now + self._cache_ttl)
        return list(entries), source

    def _limit(self, limit: int | None) -> int:
        return self._default_limit if limit is None else max(limit, 0)

    async def list_top(self, limit: int | None = None) -> list[CatalogEntry]:
        entries, _ = await self.resolve()
        return entries[: self._limit(limit)]

    async def search(self, query: str, limit: int | None = None) -> list[CatalogEntry]:
        limit = self._limit(limit)
        matcher = QueryMatcher(query)
        entries, source = await self.resolve()
        if matcher.empty:
            return entries[:limit]

        matched = matcher.filter(entries)
        if matched:
            return matched[:limit]

        if source != CatalogSource.STATIC:
            remote = await self._fetch_tier(SearchTier(self._hub, matcher.query))
            if remote:
                return remote[:limit]

        logger.info("catalog_search_static_fallback", query=matcher.query)
        return matcher.filter(dedupe(self._static()))[:limit]

    async def describe(self, name: str) -> str | None:
        """Long-form description for a model, looked up by its base name."""
        base = (name or "").split(":", 1)[0].strip()
        if not base:
            return None

        try:
            items = records_from_payload(await self._hub.get_json("/api/search", params={"q": base}))
        except (httpx.HTTPError, ValueError) as e:
            logger.info("catalog_describe_search_failed", model=base, error=str(e))
            items = []
        if items:
            lower = base.lower()
            best = (
                next((it for it in items if record_name(it).lower() == lower), None)
                or next((it for it in items if record_name(it).lower().startswith(lower)), None)
                or items[0]
            )
            description = str(best.get("description") or "").strip()
            if description:
                return description

        try:
            html = await self._hub.get_html(f"/library/{quote(base, safe='')}")
        except httpx.HTTPError as e:
            logger.info("catalog_describe_page_failed", model=base, error=str(e))
            return None
        return extract_meta_description(html) or extract_json_ld_description(html)
