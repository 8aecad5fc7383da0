import shutil
from unittest.mock import MagicMock, patch

import pytest

from studio.schemas.runtime import RuntimeStatus
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.runtime.uninstaller import (
    MANUAL_UNINSTALL_HINTS,
    BundledUninstaller,
    DisableUserService,
    PackageManagerUninstall,
    RuntimeUninstaller,
    default_uninstall_strategies,
)
from tests.mocks.fake_process import FakeExec
from tests.mocks.sandbox import add_tool, install_fake_runtime


class DownProbe:
    host = "http://localhost:11434"

    async def ping(self, host=None, timeout=None) -> bool:
        return False


def _populate(home):
    models = home / ".ollama" / "models"
    models.mkdir(parents=True)
    (models / "blob").write_bytes(b"weights")
    (home / "Programs" / "Ollama").mkdir(parents=True)
    install_fake_runtime(home)


def _uninstaller(locator, strategies=None, attempts=3):
    supervisor = ServerSupervisor(DownProbe(), locator, strategies=[])
    supervisor.finish_install(True)
    uninstaller = RuntimeUninstaller(
        locator, supervisor, strategies=strategies, attempts=attempts, backoff_seconds=0, backoff_step_seconds=0
    )
    return uninstaller, supervisor


async def test_uninstall_removes_everything(make_locator, sandbox_home, tools_dir):
    _populate(sandbox_home)
    add_tool(tools_dir, "systemctl")
    locator = make_locator("linux")
    uninstaller, supervisor = _uninstaller(locator)
    fake = FakeExec()
    messages = []

    with patch("asyncio.create_subprocess_exec", new=fake):
        outcome = await uninstaller.uninstall(messages.append)

    assert outcome.success is True
    assert outcome.message == "Ollama uninstalled"
    assert not (sandbox_home / ".ollama").exists()
    assert not (sandbox_home / "Programs" / "Ollama").exists()
    assert locator.find_runtime_executable() is None
    assert supervisor.status is RuntimeStatus.NOT_INSTALLED
    assert "systemctl --user stop ollama" in fake.commands()
    assert "systemctl --user disable ollama" in fake.commands()
    assert messages[0] == "Uninstalling Ollama..."
    assert messages[-1] == "Ollama uninstalled"


async def test_strategies_fall_through_on_windows(make_locator, sandbox_home, tools_dir):
    _populate(sandbox_home)
    bundled = sandbox_home / "Programs" / "Ollama" / "unins000.exe"
    bundled.write_text("")
    winget = add_tool(tools_dir, "winget")
    locator = make_locator("windows")
    uninstaller, _ = _uninstaller(locator)
    fake = FakeExec(lambda args: 1 if args[0] == str(bundled) else 0)

    with patch("asyncio.create_subprocess_exec", new=fake):
        outcome = await uninstaller.uninstall()

    assert outcome.success is True
    commands = fake.commands()
    assert f"{bundled} /S" in commands
    assert any(c.startswith(f"{winget} uninstall -e --id Ollama.Ollama") for c in commands)
    assert "taskkill /F /T /IM ollama.exe" in commands


async def test_unavailable_strategies_are_skipped(make_locator, sandbox_home):
    _populate(sandbox_home)
    locator = make_locator("macos")
    uninstaller, _ = _uninstaller(locator)
    fake = FakeExec()

    with patch("asyncio.create_subprocess_exec", new=fake):
        outcome = await uninstaller.uninstall()

    assert outcome.success is True
    assert not any("brew" in c for c in fake.commands())


async def test_transient_lock_is_retried(make_locator, sandbox_home):
    target = sandbox_home / ".ollama"
    target.mkdir()
    uninstaller, _ = _uninstaller(make_locator("windows"))
    remove = MagicMock(side_effect=[OSError("file in use"), None])
    fake = FakeExec()

    with patch.object(uninstaller, "_remove", remove), patch("asyncio.create_subprocess_exec", new=fake):
        assert await uninstaller.remove_with_retry(target) is True

    assert remove.call_count == 2
    assert fake.commands() == ["taskkill /F /T /IM ollama.exe"]


async def test_permission_error_uses_noninteractive_sudo(make_locator, sandbox_home):
    target = sandbox_home / ".ollama"
    target.mkdir()
    uninstaller, _ = _uninstaller(make_locator("linux"))
    remove = MagicMock(side_effect=PermissionError("root owned"))

    def handler(args):
        if args[:3] == ["sudo", "-n", "rm"]:
            shutil.rmtree(args[-1])
        return 0

    fake = FakeExec(handler)
    with patch.object(uninstaller, "_remove", remove), patch("asyncio.create_subprocess_exec", new=fake):
        assert await uninstaller.remove_with_retry(target) is True

    assert remove.call_count == 1
    assert fake.commands() == [f"sudo -n rm -rf {target}"]
    assert not target.exists()


async def test_leftovers_are_reported_with_hint(make_locator, sandbox_home):
    _populate(sandbox_home)
    locator = make_locator("macos")
    uninstaller, supervisor = _uninstaller(locator, strategies=[], attempts=2)
    remove = MagicMock(side_effect=OSError("busy"))

    with patch.object(uninstaller, "_remove", remove):
        outcome = await uninstaller.uninstall()

    assert outcome.success is False
    assert str(sandbox_home / ".ollama") in outcome.message
    assert outcome.message.endswith(MANUAL_UNINSTALL_HINTS["macos"])
    assert supervisor.status is RuntimeStatus.STOPPED


async def test_missing_paths_count_as_removed(make_locator, sandbox_home):
    uninstaller, _ = _uninstaller(make_locator("linux"))
    assert await uninstaller.remove_with_retry(sandbox_home / "nothing-here") is True


def test_removal_targets_start_with_data_directory(make_locator, sandbox_home):
    uninstaller, _ = _uninstaller(make_locator("linux"))
    assert uninstaller.removal_targets()[0] == sandbox_home / ".ollama"


@pytest.mark.parametrize(
    "family, kinds",
    [
        ("windows", [BundledUninstaller, PackageManagerUninstall]),
        ("macos", [PackageManagerUninstall]),
        ("linux", [DisableUserService]),
    ],
)
def test_default_uninstall_strategies(make_locator, family, kinds):
    assert [type(s) for s in default_uninstall_strategies(make_locator(family))] == kinds


def test_runtime_data_detection(make_locator, sandbox_home):
    uninstaller, _ = _uninstaller(make_locator("linux"))
    assert uninstaller.has_runtime_data() is False

    (sandbox_home / ".ollama").mkdir()
    assert uninstaller.has_runtime_data() is True
