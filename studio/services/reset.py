"""Coordinated teardown: models, runtime, local state, onboarding flag."""

import structlog

from studio.schemas.models import OperationResult
from studio.services.app_state import AppStateStore
from studio.services.catalog.resolver import CatalogResolver
from studio.services.runtime.client import RuntimeClient
from studio.services.runtime.installer import InstallationManager
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.runtime.uninstaller import RuntimeUninstaller
from studio.services.status import StatusCallback, notify

logger = structlog.get_logger()

RESET_COMPLETE_MESSAGE = "All data, models, and Ollama have been removed. The app will now reload."


class LifecycleResetOrchestrator:
    def __init__(
        self,
        runtime: RuntimeClient,
        supervisor: ServerSupervisor,
        installer: InstallationManager,
        uninstaller: RuntimeUninstaller,
        app_state: AppStateStore,
        catalog: CatalogResolver | None = None,
    ):
        self._runtime = runtime
        self._supervisor = supervisor
        self._installer = installer
        self._uninstaller = uninstaller
        self._app_state = app_state
        self._catalog = catalog

    async def _enumerate(self) -> list[str] | None:
        names = await self._runtime.list_installed()
        if names is not None:
            return names
        if not self._installer.is_installed():
            # A runtime we cannot find may still own model data on disk.
            if self._uninstaller.has_runtime_data():
                logger.warning("reset_runtime_data_without_runtime")
                return None
            logger.info("reset_runtime_absent")
            return []
        # Installed but not answering: start it once so its models can be listed.
        if await self._supervisor.ensure_running():
            return await self._runtime.list_installed()
        return None

    async def delete_all(self, on_status: StatusCallback | None = None) -> OperationResult:
        """Delete every installed model. Individual failures are skipped."""
        notify(on_status, "Deleting all models...")
        names = await self._enumerate()
        if names is None:
            logger.error("reset_enumeration_failed")
            return OperationResult(
                success=False,
                message="Failed to delete models: the installed models could not be listed.",
            )

        failed = []
        for name in names:
            notify(on_status, f"Deleting {name}...")
            if not await self._runtime.delete_model(name):
                logger.warning("reset_model_delete_failed", model=name)
                failed.append(name)

        if failed:
            notify(on_status, f"Deleted {len(names) - len(failed)} of {len(names)} models")
            return OperationResult(
                success=True,
                message=f"Some models could not be deleted: {', '.join(failed)}",
            )
        notify(on_status, "All models deleted")
        return OperationResult(success=True)

    async def uninstall(self, on_status: StatusCallback | None = None) -> OperationResult:
        outcome = await self._uninstaller.uninstall(on_status)
        return OperationResult(success=outcome.success, message=outcome.message)

    async def reset_everything(self, on_status: StatusCallback | None = None) -> OperationResult:
        logger.info("reset_started")
        deleted = await self.delete_all(on_status)
        if not deleted.success:
            return deleted

        problems = []
        if deleted.message:
            problems.append(deleted.message)

        removed = await self.uninstall(on_status)
        if not removed.success:
            problems.append(f"Models deleted, but {removed.message}")

        notify(on_status, "Clearing app data...")
        if not self._app_state.clear_cache():
            problems.append("App cache could not be fully cleared.")
        if self._catalog is not None:
            self._catalog.invalidate()

        try:
            self._app_state.mark_first_run()
        except OSError as e:
            logger.error("reset_first_run_flag_failed", error=str(e))
            problems.append("The onboarding flag could not be saved.")

        if problems:
            logger.warning("reset_finished_with_problems", problems=problems)
            notify(on_status, "Reset finished with problems")
            return OperationResult(success=False, message=" ".join(problems))

        logger.info("reset_completed")
        notify(on_status, "Reset complete!")
        return OperationResult(success=True, message=RESET_COMPLETE_MESSAGE)
