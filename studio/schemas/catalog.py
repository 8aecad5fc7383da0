from enum import Enum

from pydantic import BaseModel, ConfigDict


class CatalogSource(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    STATIC = "static"


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    description: str = ""
    size_bytes: int | None = None
    likes: int = 0
    downloads: int = 0
    works_locally: bool = True
    source: CatalogSource = CatalogSource.PRIMARY


class CatalogEntryView(CatalogEntry):
    """Catalog entry annotated for the browsing grid."""

    installed: bool = False
    fits_in_memory: bool | None = None  # None = size unknown


class ModelDescription(BaseModel):
    name: str
    description: str | None = None
