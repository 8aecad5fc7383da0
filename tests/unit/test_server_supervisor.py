from unittest.mock import patch

import pytest

from studio.schemas.runtime import RuntimeStatus
from studio.services.runtime.supervisor import (
    DirectLaunch,
    ServerSupervisor,
    ServiceStart,
    StartStrategy,
    default_start_strategies,
)
from tests.mocks.fake_process import FakeExec
from tests.mocks.sandbox import install_fake_runtime


class ScriptedProbe:
    """Health probe that answers from a list, repeating the last answer."""

    host = "http://localhost:11434"

    def __init__(self, *answers: bool):
        self._answers = list(answers)
        self.calls = 0

    async def ping(self, host=None, timeout=None) -> bool:
        self.calls += 1
        if len(self._answers) > 1:
            return self._answers.pop(0)
        return self._answers[0]


class RecordingStrategy(StartStrategy):
    def __init__(self, name: str, accept: bool = True, on_start=None, raises: Exception | None = None):
        self.name = name
        self._accept = accept
        self._on_start = on_start
        self._raises = raises
        self.attempts = 0

    async def try_start(self, on_status=None) -> bool:
        self.attempts += 1
        if self._raises:
            raise self._raises
        if self._on_start:
            self._on_start()
        return self._accept


def _supervisor(probe, locator, strategies, deadline=0.05):
    return ServerSupervisor(probe, locator, strategies=strategies, poll_interval=0.0, deadline=deadline, status_every=3)


async def test_ensure_running_is_idempotent_when_healthy(make_locator):
    """A healthy runtime means no start attempts and no process spawns."""
    fake = FakeExec()
    strategy = RecordingStrategy("service")
    supervisor = _supervisor(ScriptedProbe(True), make_locator(), [strategy])
    messages = []

    with patch("asyncio.create_subprocess_exec", new=fake):
        assert await supervisor.ensure_running(messages.append) is True
        assert await supervisor.ensure_running(messages.append) is True

    assert fake.calls == []
    assert strategy.attempts == 0
    assert supervisor.status is RuntimeStatus.RUNNING
    assert messages == ["Ollama server is running", "Ollama server is running"]


async def test_ensure_running_with_default_strategies_spawns_nothing_when_healthy(make_locator, sandbox_home):
    install_fake_runtime(sandbox_home)
    fake = FakeExec()
    locator = make_locator("linux")
    supervisor = ServerSupervisor(ScriptedProbe(True), locator, default_start_strategies(locator))

    with patch("asyncio.create_subprocess_exec", new=fake):
        assert await supervisor.ensure_running() is True

    assert fake.calls == []


async def test_starts_and_waits_until_healthy(make_locator):
    probe = ScriptedProbe(False, False, False, True)
    failing = RecordingStrategy("service", accept=False)
    launcher = RecordingStrategy("serve")
    supervisor = _supervisor(probe, make_locator(), [failing, launcher], deadline=5)
    messages = []

    assert await supervisor.ensure_running(messages.append) is True

    assert failing.attempts == 1
    assert launcher.attempts == 1
    assert supervisor.status is RuntimeStatus.RUNNING
    assert messages[0] == "Starting Ollama server…"
    assert messages[-1] == "Ollama server is ready!"


async def test_strategy_exception_falls_through(make_locator):
    broken = RecordingStrategy("service", raises=RuntimeError("boom"))
    launcher = RecordingStrategy("serve")
    supervisor = _supervisor(ScriptedProbe(False, True), make_locator(), [broken, launcher], deadline=5)

    assert await supervisor.ensure_running() is True
    assert launcher.attempts == 1


async def test_deadline_marks_unreachable(make_locator):
    supervisor = _supervisor(ScriptedProbe(False), make_locator(), [RecordingStrategy("serve")], deadline=0.05)
    messages = []

    assert await supervisor.ensure_running(messages.append) is False

    assert supervisor.status is RuntimeStatus.UNREACHABLE
    assert messages[-1] == "Server startup taking longer than expected"


async def test_waiting_status_every_third_poll(make_locator):
    probe = ScriptedProbe(False, False, False, False, False, False, False, True)
    supervisor = _supervisor(probe, make_locator(), [RecordingStrategy("serve")], deadline=5)
    messages = []

    assert await supervisor.ensure_running(messages.append)

    waiting = [m for m in messages if m.startswith("Waiting for Ollama server")]
    assert len(waiting) == 2


async def test_detect_derives_status(make_locator, sandbox_home):
    locator = make_locator("linux")
    supervisor = _supervisor(ScriptedProbe(False), locator, [])
    assert await supervisor.detect() is RuntimeStatus.NOT_INSTALLED

    install_fake_runtime(sandbox_home)
    assert await supervisor.detect() is RuntimeStatus.STOPPED

    supervisor = _supervisor(ScriptedProbe(True), locator, [])
    assert await supervisor.detect() is RuntimeStatus.RUNNING


async def test_detect_leaves_install_in_progress_alone(make_locator):
    supervisor = _supervisor(ScriptedProbe(False), make_locator(), [])
    supervisor.begin_install()
    assert await supervisor.detect() is RuntimeStatus.INSTALLING


def test_install_transitions(make_locator):
    supervisor = _supervisor(ScriptedProbe(False), make_locator(), [])
    assert supervisor.status is RuntimeStatus.NOT_INSTALLED
    supervisor.begin_install()
    assert supervisor.status is RuntimeStatus.INSTALLING
    supervisor.finish_install(True)
    assert supervisor.status is RuntimeStatus.STOPPED
    supervisor.mark_uninstalled()
    assert supervisor.status is RuntimeStatus.NOT_INSTALLED
    supervisor.begin_install()
    supervisor.finish_install(False)
    assert supervisor.status is RuntimeStatus.NOT_INSTALLED


async def test_unexpected_exit_is_noticed_on_next_call(make_locator):
    probe = ScriptedProbe(True, False, True)
    supervisor = _supervisor(probe, make_locator(), [RecordingStrategy("serve")], deadline=5)

    assert await supervisor.ensure_running()
    assert supervisor.status is RuntimeStatus.RUNNING
    assert await supervisor.ensure_running()
    assert supervisor.status is RuntimeStatus.RUNNING
    assert probe.calls == 3


async def test_service_start_runs_command():
    fake = FakeExec()
    messages = []
    with patch("asyncio.create_subprocess_exec", new=fake):
        started = await ServiceStart(["systemctl", "--user", "start", "ollama"], "Started Ollama service").try_start(
            messages.append
        )
    assert started is True
    assert fake.calls == [["systemctl", "--user", "start", "ollama"]]
    assert messages == ["Started Ollama service"]


async def test_direct_launch_requires_executable(make_locator, sandbox_home):
    locator = make_locator("linux")
    assert await DirectLaunch(locator).try_start() is False

    exe = install_fake_runtime(sandbox_home)
    fake = FakeExec()
    with patch("asyncio.create_subprocess_exec", new=fake):
        assert await DirectLaunch(locator).try_start() is True
    assert fake.calls == [[str(exe), "serve"]]


@pytest.mark.parametrize(
    "family, first",
    [("windows", ["net", "start", "Ollama"]), ("macos", ["open", "-a", "Ollama"]), ("linux", ["systemctl", "--user", "start", "ollama"])],
)
async def test_default_start_strategies(make_locator, family, first):
    fake = FakeExec()
    strategies = default_start_strategies(make_locator(family))
    assert isinstance(strategies[-1], DirectLaunch)
    with patch("asyncio.create_subprocess_exec", new=fake):
        await strategies[0].try_start()
    assert fake.calls == [first]


async def test_stop_runs_stop_commands(make_locator):
    fake = FakeExec()
    supervisor = _supervisor(ScriptedProbe(True), make_locator("linux"), [])
    await supervisor.detect()
    messages = []
    with patch("asyncio.create_subprocess_exec", new=fake):
        await supervisor.stop(messages.append)
    assert ["systemctl", "--user", "stop", "ollama"] in fake.calls
    assert supervisor.status is RuntimeStatus.STOPPED
    assert messages == ["Stopping Ollama service..."]
