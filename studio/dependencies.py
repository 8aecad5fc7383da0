from fastapi import Request

from studio.services.app_state import AppStateStore
from studio.services.catalog.resolver import CatalogResolver
from studio.services.platform import PlatformLocator
from studio.services.pull import PullOrchestrator
from studio.services.reset import LifecycleResetOrchestrator
from studio.services.runtime.client import RuntimeClient
from studio.services.runtime.installer import InstallationManager
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.updates import UpdateChecker


def get_locator(request: Request) -> PlatformLocator:
    return request.app.state.locator


def get_runtime_client(request: Request) -> RuntimeClient:
    """Return the runtime API client stored on app state during lifespan."""
    return request.app.state.runtime_client


def get_supervisor(request: Request) -> ServerSupervisor:
    return request.app.state.supervisor


def get_installer(request: Request) -> InstallationManager:
    return request.app.state.installer


def get_pull_orchestrator(request: Request) -> PullOrchestrator:
    return request.app.state.pull_orchestrator


def get_catalog(request: Request) -> CatalogResolver:
    return request.app.state.catalog


def get_app_state_store(request: Request) -> AppStateStore:
    return request.app.state.app_state


def get_reset_orchestrator(request: Request) -> LifecycleResetOrchestrator:
    return request.app.state.reset_orchestrator


def get_update_checker(request: Request) -> UpdateChecker:
    return request.app.state.update_checker
