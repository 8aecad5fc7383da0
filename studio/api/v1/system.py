from fastapi import APIRouter

from studio.schemas.system import SystemMemory
from studio.services.system import system_memory

router = APIRouter()


@router.get("/studio/system/memory")
async def get_memory() -> SystemMemory:
    return system_memory()
