from enum import Enum

from pydantic import BaseModel


class RuntimeStatus(str, Enum):
    NOT_INSTALLED = "not_installed"
    INSTALLING = "installing"
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    UNREACHABLE = "unreachable"


class InstallationOutcome(BaseModel):
    success: bool
    message: str | None = None


class PackageManager(BaseModel):
    name: str
    invocable: bool = False


class RuntimeStatusResponse(BaseModel):
    status: RuntimeStatus
    host: str
    executable: str | None = None
    os_family: str
    package_managers: list[PackageManager] = []


class RuntimeActionResponse(BaseModel):
    success: bool
    message: str | None = None
    status: RuntimeStatus
    log: list[str] = []


class UpdateCheckResponse(BaseModel):
    needs_update: bool
    current_version: str | None = None
    latest_version: str | None = None
