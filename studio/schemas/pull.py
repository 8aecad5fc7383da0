from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PullPhase(str, Enum):
    PREPARING = "preparing"
    MANIFEST = "manifest"
    DOWNLOADING = "downloading"
    VERIFYING = "verifying"
    WRITING = "writing"
    STATUS = "status"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


TERMINAL_PHASES = frozenset({PullPhase.SUCCESS, PullPhase.ERROR, PullPhase.CANCELLED})


class PullProgressEvent(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    operation_id: str
    model_id: str
    phase: PullPhase
    status: str
    percent: float | None = Field(default=None, ge=0, le=100)
    completed: int | None = None
    total: int | None = None
    digest: str | None = None

    @property
    def terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


class PullRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(min_length=1)


class PullStartedResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    operation_id: str
    model_id: str
    status: str = "started"


class PullCancelResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    cancelled: bool
