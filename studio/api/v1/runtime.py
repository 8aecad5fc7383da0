from fastapi import APIRouter, Depends

from studio.dependencies import (
    get_installer,
    get_locator,
    get_reset_orchestrator,
    get_supervisor,
    get_update_checker,
)
from studio.schemas.models import OperationResult
from studio.schemas.runtime import (
    RuntimeActionResponse,
    RuntimeStatus,
    RuntimeStatusResponse,
    UpdateCheckResponse,
)
from studio.services.platform import PlatformLocator
from studio.services.reset import LifecycleResetOrchestrator
from studio.services.runtime.installer import InstallationManager
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.status import StatusLog
from studio.services.updates import UpdateChecker

router = APIRouter()


@router.get("/studio/runtime/status")
async def runtime_status(
    supervisor: ServerSupervisor = Depends(get_supervisor),
    locator: PlatformLocator = Depends(get_locator),
) -> RuntimeStatusResponse:
    status = await supervisor.detect()
    exe = locator.find_runtime_executable()
    return RuntimeStatusResponse(
        status=status,
        host=supervisor.host,
        executable=str(exe) if exe else None,
        os_family=locator.os_family,
        package_managers=locator.available_package_managers(),
    )


@router.post("/studio/runtime/install")
async def install_runtime(
    installer: InstallationManager = Depends(get_installer),
    supervisor: ServerSupervisor = Depends(get_supervisor),
) -> RuntimeActionResponse:
    """Install Ollama with the first strategy that works on this OS."""
    log = StatusLog()
    outcome = await installer.install(log)
    return RuntimeActionResponse(
        success=outcome.success,
        message=outcome.message,
        status=supervisor.status,
        log=log.lines,
    )


@router.post("/studio/runtime/ensure-running")
async def ensure_running(
    installer: InstallationManager = Depends(get_installer),
    supervisor: ServerSupervisor = Depends(get_supervisor),
) -> RuntimeActionResponse:
    log = StatusLog()
    if not installer.is_installed() and await supervisor.detect() is not RuntimeStatus.RUNNING:
        return RuntimeActionResponse(
            success=False,
            message="Ollama is not installed.",
            status=supervisor.status,
        )
    running = await supervisor.ensure_running(log)
    return RuntimeActionResponse(
        success=running,
        message=None if running else "Server startup taking longer than expected",
        status=supervisor.status,
        log=log.lines,
    )


@router.get("/studio/runtime/update")
async def check_update(
    checker: UpdateChecker = Depends(get_update_checker),
) -> UpdateCheckResponse:
    return await checker.check()


@router.post("/studio/runtime/uninstall")
async def uninstall_runtime(
    reset: LifecycleResetOrchestrator = Depends(get_reset_orchestrator),
) -> OperationResult:
    log = StatusLog()
    result = await reset.uninstall(log)
    return result.model_copy(update={"log": log.lines})


@router.post("/studio/reset")
async def reset_everything(
    reset: LifecycleResetOrchestrator = Depends(get_reset_orchestrator),
) -> OperationResult:
    """Delete all models, uninstall Ollama, clear app data and restart onboarding."""
    log = StatusLog()
    result = await reset.reset_everything(log)
    return result.model_copy(update={"log": log.lines})
