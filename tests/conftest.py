from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from studio.config import Settings
from tests.mocks.fake_hub import create_fake_hub
from tests.mocks.fake_ollama import create_fake_ollama
from tests.mocks.sandbox import HUB_URL, RUNTIME_HOST, SandboxLocator


@pytest.fixture(autouse=True)
def block_subprocesses():
    """No test may spawn a real process; tests that need one patch over this."""
    with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("subprocess blocked in tests")):
        yield


@pytest.fixture
def sandbox_home(tmp_path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def tools_dir(tmp_path) -> Path:
    path = tmp_path / "tools"
    path.mkdir()
    return path


@pytest.fixture
def make_locator(sandbox_home, tools_dir):
    def _make(os_family: str = "linux") -> SandboxLocator:
        return SandboxLocator(os_family=os_family, environ={"PATH": str(tools_dir)}, home=sandbox_home)

    return _make


@pytest.fixture
def fake_ollama():
    return create_fake_ollama()


@pytest.fixture
def fake_hub():
    return create_fake_hub()


@pytest_asyncio.fixture
async def http_client(fake_ollama, fake_hub):
    """One client that routes the runtime host and the hub to their fakes."""
    client = httpx.AsyncClient(
        mounts={
            RUNTIME_HOST: ASGITransport(app=fake_ollama),
            HUB_URL: ASGITransport(app=fake_hub),
        }
    )
    yield client
    await client.aclose()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        runtime_host=RUNTIME_HOST,
        hub_base_url=HUB_URL,
        release_api_url=f"{HUB_URL}/repos/ollama/ollama/releases/latest",
        state_dir=tmp_path / "state",
        startup_poll_interval_seconds=0.0,
        startup_deadline_seconds=0.05,
        install_settle_seconds=0.0,
        installer_settle_seconds=0.0,
        removal_backoff_seconds=0.0,
        removal_backoff_step_seconds=0.0,
        catalog_cache_ttl_seconds=0.0,
    )


@pytest.fixture
def services(http_client, test_settings, make_locator):
    from studio.services.bootstrap import build_services

    return build_services(http_client, test_settings, make_locator("linux"))


@pytest_asyncio.fixture
async def client(services):
    """Client for the Studio API, wired to the fake runtime and hub."""
    from studio.main import app, attach_services

    attach_services(app, services)
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
