"""Installs the Ollama runtime using an ordered list of strategies per OS.

Each strategy either reports a verified install or falls through to the next.
Only running out of strategies is surfaced, as an ``InstallationOutcome`` that
points the user at the manual download page.
"""

import asyncio
import tempfile
import webbrowser
from abc import ABC, abstractmethod
from pathlib import Path

import httpx
import structlog

from studio.schemas.runtime import InstallationOutcome
from studio.services.commands import run_command
from studio.services.platform import MACOS, WINDOWS, PlatformLocator
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.status import StatusCallback, notify

logger = structlog.get_logger()

OLLAMA_WINGET_ID = "Ollama.Ollama"
WINDOWS_INSTALLER_URL = "https://ollama.com/download/OllamaSetup.exe"
LINUX_INSTALL_SCRIPT_URL = "https://ollama.com/install.sh"
MANUAL_DOWNLOAD_URLS = {
    WINDOWS: "https://ollama.com/download",
    MACOS: "https://ollama.com/download/mac",
}
DEFAULT_MANUAL_URL = "https://ollama.com/download"


def manual_download_url(os_family: str) -> str:
    return MANUAL_DOWNLOAD_URLS.get(os_family, DEFAULT_MANUAL_URL)


class InstallStrategy(ABC):
    name: str = "strategy"
    label: str = "Installer"
    settle_seconds: float = 2.0

    def available(self) -> bool:
        return True

    @abstractmethod
    async def try_install(self, on_status: StatusCallback | None = None) -> bool:
        """Run the strategy. True means the tool reported success; the manager
        still verifies the executable afterwards."""
        ...


class PackageManagerInstall(InstallStrategy):
    """Install through the OS's preferred package manager (winget, Homebrew)."""

    def __init__(
        self,
        locator: PlatformLocator,
        tool: str,
        args: list[str],
        label: str,
        timeout: float = 300.0,
        settle_seconds: float = 2.0,
    ):
        self.name = tool
        self.label = label
        self._locator = locator
        self._tool = tool
        self._args = args
        self._timeout = timeout
        self.settle_seconds = settle_seconds

    def available(self) -> bool:
        return self._locator.preferred_package_manager() == self._tool

    async def try_install(self, on_status: StatusCallback | None = None) -> bool:
        notify(on_status, f"Installing Ollama via {self.label} (this may take a minute)…")
        exe = self._locator.which(self._tool) or self._tool
        result = await run_command([exe, *self._args], timeout=self._timeout)
        if not result.success:
            logger.warning("install_package_manager_failed", tool=self._tool, error=result.message[-500:])
        return result.success


async def download_file(
    client: httpx.AsyncClient,
    url: str,
    dest: Path,
    on_status: StatusCallback | None = None,
    label: str = "installer",
) -> None:
    """Stream ``url`` to ``dest``, reporting coarse percentage progress."""
    async with client.stream("GET", url, follow_redirects=True, timeout=httpx.Timeout(30.0, read=300.0)) as response:
        response.raise_for_status()
        total = int(response.headers.get("content-length") or 0)
        received = 0
        last_decile = -1
        with open(dest, "wb") as f:
            async for chunk in response.aiter_bytes():
                f.write(chunk)
                received += len(chunk)
                if total:
                    decile = int(received * 10 / total)
                    if decile != last_decile:
                        last_decile = decile
                        notify(on_status, f"Downloading Ollama {label}… {decile * 10}%")


class DirectInstaller(InstallStrategy):
    """Download the vendor installer and run it silently (Windows)."""

    name = "direct-installer"
    label = "the direct installer"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str = WINDOWS_INSTALLER_URL,
        args: tuple[str, ...] = ("/S",),
        timeout: float = 300.0,
        settle_seconds: float = 3.0,
    ):
        self._client = http_client
        self._url = url
        self._args = args
        self._timeout = timeout
        self.settle_seconds = settle_seconds

    async def try_install(self, on_status: StatusCallback | None = None) -> bool:
        notify(on_status, "Downloading Ollama installer…")
        with tempfile.TemporaryDirectory(prefix="studio-install-") as tmp:
            installer = Path(tmp) / Path(self._url).name
            await download_file(self._client, self._url, installer, on_status)
            notify(on_status, "Running installer (please wait)…")
            result = await run_command([str(installer), *self._args], timeout=self._timeout)
        if not result.success:
            logger.warning("install_direct_installer_failed", error=result.message[-500:])
        return result.success


class InstallScript(InstallStrategy):
    """Download the official install script and run it with ``sh`` (Linux)."""

    name = "install-script"
    label = "the official install script"

    def __init__(
        self,
        locator: PlatformLocator,
        http_client: httpx.AsyncClient,
        url: str = LINUX_INSTALL_SCRIPT_URL,
        timeout: float = 300.0,
        settle_seconds: float = 2.0,
    ):
        self._locator = locator
        self._client = http_client
        self._url = url
        self._timeout = timeout
        self.settle_seconds = settle_seconds

    def available(self) -> bool:
        return self._locator.which("sh") is not None

    async def try_install(self, on_status: StatusCallback | None = None) -> bool:
        notify(on_status, "Installing Ollama via official script…")
        with tempfile.TemporaryDirectory(prefix="studio-install-") as tmp:
            script = Path(tmp) / "install.sh"
            await download_file(self._client, self._url, script, on_status, label="install script")
            notify(on_status, "Downloading and installing Ollama (this may take a minute)…")
            result = await run_command(["sh", str(script)], timeout=self._timeout)
        if not result.success:
            logger.warning("install_script_failed", error=result.message[-500:])
        return result.success


class ManualDownloadPage(InstallStrategy):
    """Open the vendor download page for the user. Never a verified install."""

    name = "manual-download"
    label = "the download page"

    def __init__(self, url: str):
        self._url = url

    async def try_install(self, on_status: StatusCallback | None = None) -> bool:
        notify(on_status, "Opening Ollama download page…")
        try:
            await asyncio.to_thread(webbrowser.open, self._url)
        except webbrowser.Error as e:
            logger.warning("install_open_download_page_failed", url=self._url, error=str(e))
        return False


def default_install_strategies(
    locator: PlatformLocator,
    http_client: httpx.AsyncClient,
    command_timeout: float = 300.0,
    settle_seconds: float = 2.0,
    installer_settle_seconds: float = 3.0,
) -> list[InstallStrategy]:
    family = locator.os_family
    if family == WINDOWS:
        return [
            PackageManagerInstall(
                locator,
                "winget",
                [
                    "install", "-e", "--id", OLLAMA_WINGET_ID,
                    "--silent",
                    "--accept-package-agreements",
                    "--accept-source-agreements",
                    "--disable-interactivity",
                ],
                label="winget",
                timeout=command_timeout,
                settle_seconds=settle_seconds,
            ),
            DirectInstaller(http_client, timeout=command_timeout, settle_seconds=installer_settle_seconds),
        ]
    if family == MACOS:
        return [
            PackageManagerInstall(
                locator,
                "brew",
                ["install", "--cask", "ollama"],
                label="Homebrew",
                timeout=command_timeout,
                settle_seconds=settle_seconds,
            ),
            ManualDownloadPage(manual_download_url(MACOS)),
        ]
    return [InstallScript(locator, http_client, timeout=command_timeout, settle_seconds=settle_seconds)]


class InstallationManager:
    def __init__(
        self,
        locator: PlatformLocator,
        supervisor: ServerSupervisor,
        strategies: list[InstallStrategy],
    ):
        self._locator = locator
        self._supervisor = supervisor
        self._strategies = strategies
        self._lock = asyncio.Lock()

    def is_installed(self) -> bool:
        return self._locator.find_runtime_executable() is not None

    async def install(self, on_status: StatusCallback | None = None) -> InstallationOutcome:
        async with self._lock:
            return await self._install(on_status)

    async def _install(self, on_status: StatusCallback | None) -> InstallationOutcome:
        existing = self._locator.find_runtime_executable()
        if existing is not None:
            notify(on_status, f"Ollama is already installed: {existing}")
            self._supervisor.finish_install(True)
            return InstallationOutcome(success=True)

        self._supervisor.begin_install()
        notify(on_status, "Checking prerequisites…")

        for strategy in self._strategies:
            if not strategy.available():
                logger.info("install_strategy_unavailable", strategy=strategy.name)
                continue
            try:
                reported_ok = await strategy.try_install(on_status)
            except Exception as e:
                logger.warning("install_strategy_failed", strategy=strategy.name, error=str(e))
                reported_ok = False

            if reported_ok and await self._verify(strategy, on_status):
                self._supervisor.finish_install(True)
                return InstallationOutcome(success=True)

            notify(on_status, f"Installing via {strategy.label} did not succeed.")

        self._supervisor.finish_install(False)
        url = manual_download_url(self._locator.os_family)
        logger.error("install_exhausted", os_family=self._locator.os_family)
        return InstallationOutcome(
            success=False,
            message=f"Automatic installation failed. Please install Ollama manually from {url}",
        )

    async def _verify(self, strategy: InstallStrategy, on_status: StatusCallback | None) -> bool:
        notify(on_status, "Installation complete! Verifying…")
        await asyncio.sleep(strategy.settle_seconds)
        exe = self._locator.find_runtime_executable()
        if exe is None:
            logger.warning("install_verification_failed", strategy=strategy.name)
            return False
        notify(on_status, "Ollama installed successfully!")
        logger.info("install_succeeded", strategy=strategy.name, executable=str(exe))
        return True
