from fastapi import APIRouter, Depends, Query

from studio.dependencies import get_catalog, get_runtime_client
from studio.schemas.catalog import CatalogEntry, CatalogEntryView, ModelDescription
from studio.services.catalog.resolver import CatalogResolver
from studio.services.pull import model_present
from studio.services.runtime.client import RuntimeClient
from studio.services.system import fits_in_memory, system_memory

router = APIRouter()


async def _annotate(entries: list[CatalogEntry], runtime: RuntimeClient) -> list[CatalogEntryView]:
    installed = await runtime.installed_set()
    memory = system_memory()
    return [
        CatalogEntryView(
            **entry.model_dump(),
            installed=model_present(entry.id, installed),
            fits_in_memory=fits_in_memory(entry, memory),
        )
        for entry in entries
    ]


@router.get("/studio/catalog")
async def list_catalog(
    limit: int | None = Query(default=None, ge=0),
    catalog: CatalogResolver = Depends(get_catalog),
    runtime: RuntimeClient = Depends(get_runtime_client),
) -> list[CatalogEntryView]:
    return await _annotate(await catalog.list_top(limit), runtime)


@router.get("/studio/catalog/search")
async def search_catalog(
    q: str = Query(default=""),
    limit: int | None = Query(default=None, ge=0),
    catalog: CatalogResolver = Depends(get_catalog),
    runtime: RuntimeClient = Depends(get_runtime_client),
) -> list[CatalogEntryView]:
    """Every whitespace-separated term must match; order follows the source."""
    return await _annotate(await catalog.search(q, limit), runtime)


@router.get("/studio/catalog/{name:path}/description")
async def describe_model(
    name: str,
    catalog: CatalogResolver = Depends(get_catalog),
) -> ModelDescription:
    return ModelDescription(name=name, description=await catalog.describe(name))
