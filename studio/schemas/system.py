from pydantic import BaseModel


class SystemMemory(BaseModel):
    total_bytes: int
    available_bytes: int | None = None
    total_gb: float
