import time

from fastapi import APIRouter, Depends

from studio.dependencies import get_supervisor
from studio.schemas.health import HealthResponse
from studio.schemas.runtime import RuntimeStatus
from studio.services.runtime.supervisor import ServerSupervisor

router = APIRouter()

_start_time = time.monotonic()


@router.get("/studio/health")
async def health_check(
    supervisor: ServerSupervisor = Depends(get_supervisor),
) -> HealthResponse:
    """Backend health; degraded while the runtime is not answering."""
    runtime_status = await supervisor.detect()
    reachable = runtime_status is RuntimeStatus.RUNNING

    return HealthResponse(
        status="ok" if reachable else "degraded",
        runtime_status=runtime_status,
        runtime_reachable=reachable,
        uptime_seconds=round(time.monotonic() - _start_time, 1),
    )
