"""Keeps the local runtime process started and reachable.

``ServerSupervisor`` owns ``RuntimeStatus``. There is no background watcher:
liveness is re-evaluated lazily on each ``ensure_running`` call.
"""

import asyncio
import time
from abc import ABC, abstractmethod

import structlog

from studio.schemas.runtime import RuntimeStatus
from studio.services.commands import launch_detached, run_command
from studio.services.platform import MACOS, WINDOWS, PlatformLocator
from studio.services.runtime.health import HealthProbe
from studio.services.status import StatusCallback, notify

logger = structlog.get_logger()


class StartStrategy(ABC):
    name: str = "start"

    @abstractmethod
    async def try_start(self, on_status: StatusCallback | None = None) -> bool:
        """Issue one start attempt. True means the attempt was accepted, not that
        the server is already answering."""
        ...


class ServiceStart(StartStrategy):
    """Start the runtime through the OS service manager (or app launcher)."""

    def __init__(self, args: list[str], started_message: str, timeout: float = 30.0):
        self.name = args[0]
        self._args = args
        self._started_message = started_message
        self._timeout = timeout

    async def try_start(self, on_status: StatusCallback | None = None) -> bool:
        result = await run_command(self._args, timeout=self._timeout)
        if not result.success:
            logger.info("runtime_service_start_failed", args=self._args, error=result.message)
            return False
        notify(on_status, self._started_message)
        return True


class DirectLaunch(StartStrategy):
    """Run ``ollama serve`` as a detached background process."""

    name = "serve"

    def __init__(self, locator: PlatformLocator):
        self._locator = locator

    async def try_start(self, on_status: StatusCallback | None = None) -> bool:
        exe = self._locator.find_runtime_executable()
        if exe is None:
            logger.info("runtime_executable_missing")
            return False
        # The macOS app bundle binary is the GUI launcher, which starts its own server.
        args = [str(exe)] if exe.name == "Ollama" else [str(exe), "serve"]
        return await launch_detached(args)


def default_start_strategies(locator: PlatformLocator) -> list[StartStrategy]:
    family = locator.os_family
    if family == WINDOWS:
        service = ServiceStart(["net", "start", "Ollama"], "Started Ollama service")
    elif family == MACOS:
        service = ServiceStart(["open", "-a", "Ollama"], "Launched Ollama app")
    else:
        service = ServiceStart(["systemctl", "--user", "start", "ollama"], "Started Ollama service")
    return [service, DirectLaunch(locator)]


def default_stop_commands(os_family: str) -> list[list[str]]:
    if os_family == WINDOWS:
        return [
            ["sc", "stop", "Ollama"],
            ["net", "stop", "Ollama"],
            ["taskkill", "/F", "/T", "/IM", "ollama app.exe"],
            ["taskkill", "/F", "/T", "/IM", "ollama.exe"],
        ]
    if os_family == MACOS:
        return [
            ["osascript", "-e", 'tell application "Ollama" to quit'],
            ["pkill", "-x", "ollama"],
        ]
    return [
        ["systemctl", "--user", "stop", "ollama"],
        ["pkill", "-f", "ollama serve"],
    ]


class ServerSupervisor:
    def __init__(
        self,
        probe: HealthProbe,
        locator: PlatformLocator,
        strategies: list[StartStrategy] | None = None,
        poll_interval: float = 1.0,
        deadline: float = 45.0,
        status_every: int = 3,
    ):
        self._probe = probe
        self._locator = locator
        self._strategies = strategies if strategies is not None else default_start_strategies(locator)
        self._poll_interval = poll_interval
        self._deadline = deadline
        self._status_every = max(1, status_every)
        self._status = RuntimeStatus.NOT_INSTALLED

    @property
    def status(self) -> RuntimeStatus:
        return self._status

    @property
    def host(self) -> str:
        return self._probe.host

    def _transition(self, new: RuntimeStatus) -> None:
        if new is self._status:
            return
        logger.info("runtime_status_changed", previous=self._status.value, status=new.value)
        self._status = new

    # ── Status derivation ────────────────────────────────────────────────────

    async def detect(self) -> RuntimeStatus:
        """Re-derive status from scratch (startup, or after external changes)."""
        if await self._probe.ping():
            self._transition(RuntimeStatus.RUNNING)
        elif self._status in (RuntimeStatus.INSTALLING, RuntimeStatus.STARTING):
            # An install or start is in flight; it will settle the status itself.
            pass
        elif self._locator.find_runtime_executable() is None:
            self._transition(RuntimeStatus.NOT_INSTALLED)
        else:
            self._transition(RuntimeStatus.STOPPED)
        return self._status

    def begin_install(self) -> None:
        self._transition(RuntimeStatus.INSTALLING)

    def finish_install(self, installed: bool) -> None:
        if installed:
            if self._status in (RuntimeStatus.NOT_INSTALLED, RuntimeStatus.INSTALLING):
                self._transition(RuntimeStatus.STOPPED)
        else:
            self._transition(RuntimeStatus.NOT_INSTALLED)

    def mark_uninstalled(self) -> None:
        self._transition(RuntimeStatus.NOT_INSTALLED)

    # ── Start / stop ─────────────────────────────────────────────────────────

    async def ensure_running(self, on_status: StatusCallback | None = None) -> bool:
        """Make sure the runtime answers its health probe.

        Returns True as soon as the probe succeeds, False once the deadline
        passes. A slow start is left running in the background; a later call
        will observe it.
        """
        if await self._probe.ping():
            self._transition(RuntimeStatus.RUNNING)
            notify(on_status, "Ollama server is running")
            return True

        if self._status is RuntimeStatus.RUNNING:
            logger.warning("runtime_exited_unexpectedly", host=self.host)
            self._transition(RuntimeStatus.STOPPED)

        self._transition(RuntimeStatus.STARTING)
        notify(on_status, "Starting Ollama server…")

        for strategy in self._strategies:
            try:
                accepted = await strategy.try_start(on_status)
            except Exception as e:
                logger.warning("runtime_start_strategy_error", strategy=strategy.name, error=str(e))
                accepted = False
            logger.info("runtime_start_attempt", strategy=strategy.name, accepted=accepted)
            if accepted:
                break
        else:
            logger.warning("runtime_start_no_strategy_accepted", host=self.host)

        return await self._wait_until_healthy(on_status)

    async def _wait_until_healthy(self, on_status: StatusCallback | None) -> bool:
        start = time.monotonic()
        attempt = 0
        while time.monotonic() - start < self._deadline:
            if await self._probe.ping():
                self._transition(RuntimeStatus.RUNNING)
                notify(on_status, "Ollama server is ready!")
                return True
            attempt += 1
            if attempt % self._status_every == 0:
                waited = int(time.monotonic() - start)
                notify(on_status, f"Waiting for Ollama server… ({waited}s)")
            await asyncio.sleep(self._poll_interval)

        self._transition(RuntimeStatus.UNREACHABLE)
        notify(on_status, "Server startup taking longer than expected")
        return False

    async def stop(self, on_status: StatusCallback | None = None) -> None:
        """Best-effort stop of the service and any lingering runtime processes."""
        notify(on_status, "Stopping Ollama service...")
        for args in default_stop_commands(self._locator.os_family):
            result = await run_command(args, timeout=15.0)
            logger.debug("runtime_stop_command", args=args, success=result.success)
        if self._status is not RuntimeStatus.NOT_INSTALLED:
            self._transition(RuntimeStatus.STOPPED)
