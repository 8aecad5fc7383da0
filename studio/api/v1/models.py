import json

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from studio.core.exceptions import NotFoundError, PullStreamTakenError, RuntimeUnavailableError
from studio.dependencies import get_pull_orchestrator, get_reset_orchestrator, get_runtime_client
from studio.schemas.models import DeleteModelResponse, InstalledModelsResponse, OperationResult
from studio.schemas.pull import PullCancelResponse, PullRequest, PullStartedResponse
from studio.services.pull import PullOrchestrator
from studio.services.reset import LifecycleResetOrchestrator
from studio.services.runtime.client import RuntimeClient
from studio.services.status import StatusLog

router = APIRouter()


@router.get("/studio/models")
async def list_installed(
    runtime: RuntimeClient = Depends(get_runtime_client),
) -> InstalledModelsResponse:
    names = await runtime.list_installed()
    if names is None:
        raise RuntimeUnavailableError("Could not list installed models.")
    return InstalledModelsResponse(models=names)


@router.post("/studio/models/pull", status_code=202)
async def start_pull(
    body: PullRequest,
    pulls: PullOrchestrator = Depends(get_pull_orchestrator),
) -> PullStartedResponse:
    """Start downloading a model; follow progress on the events stream."""
    channel = pulls.start(body.model_id.strip())
    return PullStartedResponse(operation_id=channel.operation_id, model_id=channel.model_id)


@router.get("/studio/models/pull/{operation_id}/events")
async def pull_events(
    operation_id: str,
    pulls: PullOrchestrator = Depends(get_pull_orchestrator),
) -> StreamingResponse:
    """Server-sent progress events for one download.

    Each event is delivered once, so only the first client may follow a
    download; later subscribers get 409.
    """
    channel = pulls.channel(operation_id)
    if channel is None:
        raise NotFoundError(f"No download with operation id '{operation_id}'.")
    if not channel.claim_reader():
        raise PullStreamTakenError(operation_id)

    async def _stream_events():
        async for event in channel:
            yield f"data: {json.dumps(event.model_dump(mode='json'))}\n\n"

    return StreamingResponse(_stream_events(), media_type="text/event-stream")


@router.post("/studio/models/pull/{model_id:path}/cancel")
async def cancel_pull(
    model_id: str,
    pulls: PullOrchestrator = Depends(get_pull_orchestrator),
) -> PullCancelResponse:
    return PullCancelResponse(model_id=model_id, cancelled=pulls.cancel(model_id))


@router.delete("/studio/models")
async def delete_all_models(
    reset: LifecycleResetOrchestrator = Depends(get_reset_orchestrator),
) -> OperationResult:
    log = StatusLog()
    result = await reset.delete_all(log)
    return result.model_copy(update={"log": log.lines})


@router.delete("/studio/models/{name:path}")
async def delete_model(
    name: str,
    runtime: RuntimeClient = Depends(get_runtime_client),
) -> DeleteModelResponse:
    return DeleteModelResponse(name=name, deleted=await runtime.delete_model(name))
