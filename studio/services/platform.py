"""OS-specific lookup of the Ollama executable, install roots and package managers.

Everything here is read-only inspection of the filesystem and environment.
Absence is a normal outcome and is reported as ``None`` / ``False``.
"""

import os
import re
import shutil
import sys
from pathlib import Path

import structlog

from studio.schemas.runtime import PackageManager
from studio.services.commands import run_command

logger = structlog.get_logger()

WINDOWS = "windows"
MACOS = "macos"
LINUX = "linux"

# One preferred package manager per OS for installing the runtime.
PREFERRED_PACKAGE_MANAGER = {WINDOWS: "winget", MACOS: "brew", LINUX: None}

PACKAGE_MANAGERS = {
    WINDOWS: ("winget",),
    MACOS: ("brew",),
    LINUX: ("apt-get", "dnf", "pacman", "zypper"),
}

_VERSION_RE = re.compile(r"version\s+(?:is\s+)?v?(\d+(?:\.\d+)*)", re.IGNORECASE)
_BARE_VERSION_RE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


def detect_os_family() -> str:
    if os.name == "nt" or sys.platform.startswith("win"):
        return WINDOWS
    if sys.platform == "darwin":
        return MACOS
    return LINUX


def parse_version(text: str) -> str | None:
    """Extract ``X.Y.Z`` from ``ollama --version`` output."""
    match = _VERSION_RE.search(text) or _BARE_VERSION_RE.search(text)
    return match.group(1) if match else None


class PlatformLocator:
    def __init__(
        self,
        os_family: str | None = None,
        environ: dict[str, str] | None = None,
        home: Path | None = None,
    ):
        self.os_family = os_family or detect_os_family()
        self._environ = environ if environ is not None else dict(os.environ)
        self._home = home or Path.home()

    # ── Windows directory roots ──────────────────────────────────────────────

    def _env(self, name: str, default: str) -> str:
        # Windows env vars are case-insensitive
        for key, value in self._environ.items():
            if key.upper() == name.upper() and value:
                return value
        return default

    def _windows_roots(self) -> list[Path]:
        local_app_data = self._env("LOCALAPPDATA", str(self._home / "AppData" / "Local"))
        program_files = self._env("PROGRAMFILES", r"C:\Program Files")
        program_files_x86 = self._env("PROGRAMFILES(X86)", r"C:\Program Files (x86)")
        return [
            Path(local_app_data) / "Programs" / "Ollama",
            Path(program_files) / "Ollama",
            Path(program_files_x86) / "Ollama",
        ]

    # ── Candidate lists ──────────────────────────────────────────────────────

    def executable_candidates(self) -> list[Path]:
        """Well-known executable locations: user-local, system-wide, vendor."""
        if self.os_family == WINDOWS:
            return [root / "ollama.exe" for root in self._windows_roots()]
        if self.os_family == MACOS:
            return [
                Path("/Applications/Ollama.app/Contents/Resources/ollama"),
                Path("/Applications/Ollama.app/Contents/MacOS/Ollama"),
                self._home / "Applications" / "Ollama.app" / "Contents" / "Resources" / "ollama",
                self._home / "Applications" / "Ollama.app" / "Contents" / "MacOS" / "Ollama",
                Path("/opt/homebrew/bin/ollama"),
                Path("/usr/local/bin/ollama"),
                Path("/usr/bin/ollama"),
            ]
        return [
            Path("/usr/local/bin/ollama"),
            Path("/usr/bin/ollama"),
            self._home / ".local" / "bin" / "ollama",
        ]

    def install_directories(self) -> list[Path]:
        """Install roots that a direct (non-package-manager) uninstall removes."""
        if self.os_family == WINDOWS:
            return self._windows_roots()
        if self.os_family == MACOS:
            return [
                Path("/Applications/Ollama.app"),
                self._home / "Applications" / "Ollama.app",
            ]
        return [
            Path("/usr/local/bin/ollama"),
            Path("/usr/local/lib/ollama"),
            Path("/etc/systemd/system/ollama.service"),
            self._home / ".local" / "bin" / "ollama",
        ]

    def data_directories(self) -> list[Path]:
        return [self._home / ".ollama"]

    def uninstaller_candidates(self) -> list[Path]:
        if self.os_family != WINDOWS:
            return []
        return [
            root / name
            for root in self._windows_roots()
            for name in ("Uninstall Ollama.exe", "unins000.exe")
        ]

    # ── Lookups ──────────────────────────────────────────────────────────────

    @staticmethod
    def _is_executable(path: Path) -> bool:
        try:
            return path.is_file() and os.access(path, os.X_OK)
        except OSError:
            return False

    def find_runtime_executable(self) -> Path | None:
        """Return the first existing, executable runtime binary, else None."""
        for candidate in self.executable_candidates():
            if self._is_executable(candidate):
                return candidate

        names = ("ollama.exe", "ollama") if self.os_family == WINDOWS else ("ollama",)
        search_path = self._env("PATH", "")
        for name in names:
            found = shutil.which(name, path=search_path or None)
            if found and self._is_executable(Path(found)):
                return Path(found)
        return None

    def which(self, name: str) -> str | None:
        search_path = self._env("PATH", "")
        return shutil.which(name, path=search_path or None)

    def available_package_managers(self) -> list[PackageManager]:
        return [
            PackageManager(name=name, invocable=self.which(name) is not None)
            for name in PACKAGE_MANAGERS.get(self.os_family, ())
        ]

    def preferred_package_manager(self) -> str | None:
        """The single tool used to install the runtime on this OS, if invocable."""
        name = PREFERRED_PACKAGE_MANAGER.get(self.os_family)
        if name and self.which(name):
            return name
        return None

    async def runtime_version(self) -> str | None:
        """Run ``ollama --version`` and parse the version number."""
        exe = self.find_runtime_executable()
        if exe is None:
            return None
        result = await run_command([str(exe), "--version"], timeout=10.0)
        if not result.success:
            return None
        return parse_version(result.output)
