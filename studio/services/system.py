import psutil
import structlog

from studio.schemas.catalog import CatalogEntry
from studio.schemas.system import SystemMemory

logger = structlog.get_logger()


def system_memory() -> SystemMemory:
    """Physical memory of this machine, used to grade catalog entries."""
    try:
        mem = psutil.virtual_memory()
    except (OSError, RuntimeError) as e:
        logger.debug("system_memory_unavailable", reason=str(e))
        return SystemMemory(total_bytes=0, available_bytes=None, total_gb=0.0)
    return SystemMemory(
        total_bytes=mem.total,
        available_bytes=mem.available,
        total_gb=round(mem.total / (1024**3), 1),
    )


def fits_in_memory(entry: CatalogEntry, memory: SystemMemory) -> bool | None:
    """None when either the model size or the machine's memory is unknown."""
    if entry.size_bytes is None or memory.total_bytes <= 0:
        return None
    return entry.size_bytes <= memory.total_bytes
