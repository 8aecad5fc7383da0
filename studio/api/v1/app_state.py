from fastapi import APIRouter, Depends

from studio.dependencies import get_app_state_store
from studio.schemas.app_state import AppState, AppStateUpdate
from studio.services.app_state import AppStateStore

router = APIRouter()


@router.get("/studio/app-state")
async def read_app_state(store: AppStateStore = Depends(get_app_state_store)) -> AppState:
    return store.load()


@router.patch("/studio/app-state")
async def update_app_state(
    body: AppStateUpdate,
    store: AppStateStore = Depends(get_app_state_store),
) -> AppState:
    """Change onboarding preferences; omitted fields are left as they are."""
    changes = body.model_dump(exclude_unset=True)
    if changes.get("first_run") is None:
        changes.pop("first_run", None)
    return store.update(**changes)
