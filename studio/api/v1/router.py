from fastapi import APIRouter

from studio.api.v1.app_state import router as app_state_router
from studio.api.v1.catalog import router as catalog_router
from studio.api.v1.health import router as health_router
from studio.api.v1.models import router as models_router
from studio.api.v1.runtime import router as runtime_router
from studio.api.v1.system import router as system_router

v1_router = APIRouter()

v1_router.include_router(health_router, tags=["Health"])
v1_router.include_router(runtime_router, tags=["Runtime"])
v1_router.include_router(models_router, tags=["Models"])
v1_router.include_router(catalog_router, tags=["Catalog"])
v1_router.include_router(system_router, tags=["System"])
v1_router.include_router(app_state_router, tags=["App State"])
