import httpx
import semver
import structlog

from studio.schemas.runtime import UpdateCheckResponse
from studio.services.platform import PlatformLocator

logger = structlog.get_logger()


def to_semver(version: str) -> semver.Version | None:
    """Parse ``0.5``/``v0.5.7``/``0.5.7.1`` leniently; missing parts are zero."""
    text = version.strip().lstrip("vV")
    parts = text.split(".")
    if not parts or not all(p.isdigit() for p in parts):
        return None
    numbers = [int(p) for p in parts[:3]] + [0] * (3 - min(len(parts), 3))
    return semver.Version(*numbers)


class UpdateChecker:
    """Compares the installed runtime version with the latest published release."""

    def __init__(self, locator: PlatformLocator, http_client: httpx.AsyncClient, release_url: str):
        self._locator = locator
        self._client = http_client
        self._release_url = release_url

    async def latest_version(self) -> str | None:
        try:
            response = await self._client.get(
                self._release_url,
                headers={"Accept": "application/vnd.github.v3+json"},
                timeout=10.0,
            )
            if not response.is_success:
                logger.info("update_check_release_unavailable", status=response.status_code)
                return None
            tag = response.json().get("tag_name")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.info("update_check_release_failed", error=str(e))
            return None
        if not isinstance(tag, str) or not tag.strip():
            return None
        return tag.strip().lstrip("vV")

    async def check(self) -> UpdateCheckResponse:
        current = await self._locator.runtime_version()
        if not current:
            return UpdateCheckResponse(needs_update=False)

        latest = await self.latest_version()
        if not latest:
            return UpdateCheckResponse(needs_update=False, current_version=current)

        current_ver, latest_ver = to_semver(current), to_semver(latest)
        needs_update = current_ver is not None and latest_ver is not None and current_ver < latest_ver
        logger.info("update_check", current=current, latest=latest, needs_update=needs_update)
        return UpdateCheckResponse(needs_update=needs_update, current_version=current, latest_version=latest)
