from pydantic import BaseModel

from studio.schemas.runtime import RuntimeStatus


class HealthResponse(BaseModel):
    status: str  # "ok" or "degraded"
    runtime_status: RuntimeStatus
    runtime_reachable: bool
    uptime_seconds: float
