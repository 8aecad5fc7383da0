from typing import Literal

from pydantic import BaseModel


class AppState(BaseModel):
    """Client preferences persisted between launches."""

    first_run: bool = True
    mode: Literal["beginner", "power"] | None = None


class AppStateUpdate(BaseModel):
    first_run: bool | None = None
    mode: Literal["beginner", "power"] | None = None
