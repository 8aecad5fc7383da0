from pathlib import Path
from unittest.mock import patch

import pytest

from studio.services.platform import PlatformLocator, detect_os_family, parse_version
from tests.mocks.fake_process import FakeExec
from tests.mocks.sandbox import add_tool, install_fake_runtime


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ollama version is 0.5.7", "0.5.7"),
        ("ollama version 0.3.12\n", "0.3.12"),
        ("Warning: could not connect to a running Ollama instance\nollama version is v0.6.0", "0.6.0"),
        ("client 1.2", "1.2"),
        ("no digits here", None),
    ],
)
def test_parse_version(text, expected):
    assert parse_version(text) == expected


def test_detect_os_family_is_known():
    assert detect_os_family() in {"windows", "macos", "linux"}


def test_missing_runtime_is_none(make_locator):
    assert make_locator("linux").find_runtime_executable() is None


def test_finds_candidate_executable(make_locator, sandbox_home):
    exe = install_fake_runtime(sandbox_home)
    found = make_locator("linux").find_runtime_executable()
    assert found == exe
    assert found.exists()


def test_non_executable_candidate_is_ignored(make_locator, sandbox_home):
    exe = install_fake_runtime(sandbox_home)
    exe.chmod(0o644)
    assert make_locator("linux").find_runtime_executable() is None


def test_falls_back_to_path_lookup(make_locator, tools_dir):
    tool = add_tool(tools_dir, "ollama")
    assert make_locator("linux").find_runtime_executable() == tool


def test_windows_candidates_follow_environment(tmp_path):
    locator = PlatformLocator(
        os_family="windows",
        environ={"LocalAppData": str(tmp_path / "Local"), "ProgramFiles": str(tmp_path / "PF")},
        home=tmp_path,
    )
    candidates = locator.executable_candidates()
    assert candidates[0] == tmp_path / "Local" / "Programs" / "Ollama" / "ollama.exe"
    assert candidates[1] == tmp_path / "PF" / "Ollama" / "ollama.exe"
    assert all(c.name == "ollama.exe" for c in candidates)
    assert Path(tmp_path / "Local" / "Programs" / "Ollama" / "unins000.exe") in locator.uninstaller_candidates()


def test_data_directory_is_dot_ollama(tmp_path):
    locator = PlatformLocator(os_family="linux", environ={}, home=tmp_path)
    assert locator.data_directories() == [tmp_path / ".ollama"]
    assert locator.uninstaller_candidates() == []


def test_preferred_package_manager(make_locator, tools_dir):
    mac = make_locator("macos")
    assert mac.preferred_package_manager() is None

    add_tool(tools_dir, "brew")
    assert mac.preferred_package_manager() == "brew"
    # Linux installs through the vendor script, never a distro package manager.
    add_tool(tools_dir, "apt-get")
    assert make_locator("linux").preferred_package_manager() is None


def test_available_package_managers_reports_invocable(make_locator, tools_dir):
    add_tool(tools_dir, "dnf")
    managers = {pm.name: pm.invocable for pm in make_locator("linux").available_package_managers()}
    assert managers == {"apt-get": False, "dnf": True, "pacman": False, "zypper": False}


async def test_runtime_version_runs_executable(make_locator, sandbox_home):
    exe = install_fake_runtime(sandbox_home)
    fake = FakeExec(lambda args: (0, b"ollama version is 0.5.7\n"))
    with patch("asyncio.create_subprocess_exec", new=fake):
        version = await make_locator("linux").runtime_version()
    assert version == "0.5.7"
    assert fake.calls == [[str(exe), "--version"]]


async def test_runtime_version_without_runtime(make_locator):
    assert await make_locator("linux").runtime_version() is None
