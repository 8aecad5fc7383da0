"""Removes the Ollama runtime: stop it, run the OS uninstaller, then delete leftovers.

Directory removal retries with increasing backoff because files are often
still locked for a moment by the process that was just stopped.
"""

import asyncio
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from studio.schemas.runtime import InstallationOutcome
from studio.services.commands import run_command
from studio.services.platform import LINUX, MACOS, WINDOWS, PlatformLocator
from studio.services.runtime.installer import OLLAMA_WINGET_ID
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.status import StatusCallback, notify

logger = structlog.get_logger()

MANUAL_UNINSTALL_HINTS = {
    WINDOWS: "You may need to uninstall manually from Windows Settings > Apps",
    MACOS: "You may need to move Ollama.app to the Trash manually",
    LINUX: "You may need to run: sudo rm /usr/local/bin/ollama",
}


class UninstallStrategy(ABC):
    name: str = "uninstall"
    label: str = "uninstaller"
    settle_seconds: float = 1.5

    def available(self) -> bool:
        return True

    @abstractmethod
    async def try_uninstall(self, on_status: StatusCallback | None = None) -> bool:
        ...


class BundledUninstaller(UninstallStrategy):
    """The uninstaller shipped next to the Windows install."""

    name = "bundled-uninstaller"
    label = "Ollama uninstaller"

    def __init__(self, locator: PlatformLocator, timeout: float = 300.0):
        self._locator = locator
        self._timeout = timeout

    def _find(self) -> Path | None:
        for candidate in self._locator.uninstaller_candidates():
            if candidate.is_file():
                return candidate
        return None

    def available(self) -> bool:
        return self._find() is not None

    async def try_uninstall(self, on_status: StatusCallback | None = None) -> bool:
        uninstaller = self._find()
        if uninstaller is None:
            return False
        notify(on_status, "Running Ollama uninstaller...")
        result = await run_command([str(uninstaller), "/S"], timeout=self._timeout)
        return result.success


class PackageManagerUninstall(UninstallStrategy):
    def __init__(
        self,
        locator: PlatformLocator,
        tool: str,
        args: list[str],
        label: str,
        timeout: float = 300.0,
        settle_seconds: float = 1.2,
    ):
        self.name = tool
        self.label = label
        self._locator = locator
        self._tool = tool
        self._args = args
        self._timeout = timeout
        self.settle_seconds = settle_seconds

    def available(self) -> bool:
        return self._locator.which(self._tool) is not None

    async def try_uninstall(self, on_status: StatusCallback | None = None) -> bool:
        notify(on_status, f"Uninstalling via {self.label}...")
        exe = self._locator.which(self._tool) or self._tool
        result = await run_command([exe, *self._args], timeout=self._timeout)
        if not result.success:
            logger.info("uninstall_package_manager_failed", tool=self._tool, error=result.message[-500:])
        return result.success


class DisableUserService(UninstallStrategy):
    """Disable the systemd user unit so nothing restarts the runtime."""

    name = "systemd-user"
    label = "systemd"
    settle_seconds = 0.0

    def __init__(self, locator: PlatformLocator):
        self._locator = locator

    def available(self) -> bool:
        return self._locator.which("systemctl") is not None

    async def try_uninstall(self, on_status: StatusCallback | None = None) -> bool:
        result = await run_command(["systemctl", "--user", "disable", "ollama"], timeout=30.0)
        return result.success


def default_uninstall_strategies(locator: PlatformLocator, command_timeout: float = 300.0) -> list[UninstallStrategy]:
    family = locator.os_family
    if family == WINDOWS:
        return [
            BundledUninstaller(locator, timeout=command_timeout),
            PackageManagerUninstall(
                locator,
                "winget",
                [
                    "uninstall", "-e", "--id", OLLAMA_WINGET_ID,
                    "--silent",
                    "--accept-source-agreements",
                    "--disable-interactivity",
                ],
                label="winget",
                timeout=command_timeout,
            ),
        ]
    if family == MACOS:
        return [
            PackageManagerUninstall(
                locator,
                "brew",
                ["uninstall", "--cask", "ollama"],
                label="Homebrew",
                timeout=command_timeout,
                settle_seconds=0.0,
            )
        ]
    return [DisableUserService(locator)]


class RuntimeUninstaller:
    def __init__(
        self,
        locator: PlatformLocator,
        supervisor: ServerSupervisor,
        strategies: list[UninstallStrategy] | None = None,
        attempts: int = 4,
        backoff_seconds: float = 0.5,
        backoff_step_seconds: float = 0.3,
        command_timeout: float = 300.0,
    ):
        self._locator = locator
        self._supervisor = supervisor
        self._strategies = (
            strategies if strategies is not None else default_uninstall_strategies(locator, command_timeout)
        )
        self._attempts = max(1, attempts)
        self._backoff = backoff_seconds
        self._backoff_step = backoff_step_seconds

    def removal_targets(self) -> list[Path]:
        """Data directory first, then install roots."""
        return [*self._locator.data_directories(), *self._locator.install_directories()]

    def has_runtime_data(self) -> bool:
        return any(path.exists() for path in self._locator.data_directories())

    async def _kill_lingering(self) -> None:
        if self._locator.os_family == WINDOWS:
            await run_command(["taskkill", "/F", "/T", "/IM", "ollama.exe"], timeout=15.0)

    @staticmethod
    def _remove(path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    async def remove_with_retry(self, path: Path) -> bool:
        """Delete ``path``; True when it no longer exists."""
        if not path.exists() and not path.is_symlink():
            return True
        last_error: OSError | None = None
        for attempt in range(self._attempts):
            try:
                await asyncio.to_thread(self._remove, path)
                logger.info("uninstall_path_removed", path=str(path), attempt=attempt + 1)
                return True
            except FileNotFoundError:
                return True
            except PermissionError as e:
                # Root-owned files will not unlock by waiting.
                last_error = e
                break
            except OSError as e:
                last_error = e
                await self._kill_lingering()
                await asyncio.sleep(self._backoff + attempt * self._backoff_step)

        if isinstance(last_error, PermissionError) and self._locator.os_family != WINDOWS:
            result = await run_command(["sudo", "-n", "rm", "-rf", str(path)], timeout=30.0)
            if result.success and not path.exists():
                logger.info("uninstall_path_removed_with_sudo", path=str(path))
                return True

        logger.warning("uninstall_path_remove_failed", path=str(path), error=str(last_error))
        return False

    async def uninstall(self, on_status: StatusCallback | None = None) -> InstallationOutcome:
        notify(on_status, "Uninstalling Ollama...")
        await self._supervisor.stop(on_status)
        await self._kill_lingering()

        for strategy in self._strategies:
            if not strategy.available():
                continue
            try:
                removed = await strategy.try_uninstall(on_status)
            except Exception as e:
                logger.warning("uninstall_strategy_failed", strategy=strategy.name, error=str(e))
                removed = False
            logger.info("uninstall_strategy_result", strategy=strategy.name, success=removed)
            if removed:
                await asyncio.sleep(strategy.settle_seconds)
                break

        leftovers = []
        for path in self.removal_targets():
            if not await self.remove_with_retry(path):
                leftovers.append(str(path))

        if leftovers:
            hint = MANUAL_UNINSTALL_HINTS.get(self._locator.os_family, "")
            message = f"Failed to remove {', '.join(leftovers)}. {hint}".strip()
            logger.error("uninstall_incomplete", leftovers=leftovers)
            if self._locator.find_runtime_executable() is None:
                self._supervisor.mark_uninstalled()
            return InstallationOutcome(success=False, message=message)

        self._supervisor.mark_uninstalled()
        notify(on_status, "Ollama uninstalled")
        return InstallationOutcome(success=True, message="Ollama uninstalled")
