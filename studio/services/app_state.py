"""JSON-file store for the client's first-run flag, UI mode and cache directory."""

import shutil
from pathlib import Path

import structlog
from pydantic import ValidationError

from studio.schemas.app_state import AppState

logger = structlog.get_logger()

STATE_FILENAME = "settings.json"
CACHE_DIRNAME = "cache"


class AppStateStore:
    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.state_path = self.state_dir / STATE_FILENAME
        self.cache_dir = self.state_dir / CACHE_DIRNAME

    def load(self) -> AppState:
        """Current state; a missing or corrupt file reads as defaults."""
        try:
            return AppState.model_validate_json(self.state_path.read_text())
        except FileNotFoundError:
            return AppState()
        except (OSError, ValidationError) as e:
            logger.warning("app_state_unreadable", path=str(self.state_path), error=str(e))
            return AppState()

    def save(self, state: AppState) -> AppState:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.state_path.with_suffix(".tmp")
        tmp.write_text(state.model_dump_json(indent=2))
        tmp.replace(self.state_path)
        return state

    def update(self, **changes) -> AppState:
        state = self.load().model_copy(update=changes)
        return self.save(AppState.model_validate(state.model_dump()))

    def mark_first_run(self) -> AppState:
        """Flag the client for onboarding again and forget the chosen mode."""
        state = self.update(first_run=True, mode=None)
        logger.info("app_state_first_run_flagged")
        return state

    def clear_cache(self) -> bool:
        """Remove the cache directory. True when nothing remains afterwards."""
        if not self.cache_dir.exists():
            return True
        try:
            shutil.rmtree(self.cache_dir)
        except OSError as e:
            logger.warning("app_cache_clear_failed", path=str(self.cache_dir), error=str(e))
            return False
        logger.info("app_cache_cleared", path=str(self.cache_dir))
        return True
