from pydantic import BaseModel


class InstalledModelsResponse(BaseModel):
    models: list[str]


class DeleteModelResponse(BaseModel):
    name: str
    deleted: bool


class OperationResult(BaseModel):
    """Terminal result of a multi-step teardown operation."""

    success: bool
    message: str | None = None
    log: list[str] = []
