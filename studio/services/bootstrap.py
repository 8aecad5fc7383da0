"""Wires the runtime, pull, catalog and reset services from settings.

Shared by the FastAPI lifespan and the CLI so both see the same object graph.
"""

from dataclasses import dataclass

import httpx

from studio.config import Settings, settings as default_settings
from studio.services.app_state import AppStateStore
from studio.services.catalog.resolver import CatalogResolver
from studio.services.catalog.sources import HubClient
from studio.services.platform import PlatformLocator
from studio.services.pull import PullOrchestrator
from studio.services.reset import LifecycleResetOrchestrator
from studio.services.runtime.client import RuntimeClient
from studio.services.runtime.health import HealthProbe, is_local_host
from studio.services.runtime.installer import InstallationManager, default_install_strategies
from studio.services.runtime.supervisor import ServerSupervisor
from studio.services.runtime.uninstaller import RuntimeUninstaller
from studio.services.updates import UpdateChecker


@dataclass
class Services:
    http_client: httpx.AsyncClient
    locator: PlatformLocator
    probe: HealthProbe
    runtime: RuntimeClient
    supervisor: ServerSupervisor
    installer: InstallationManager
    uninstaller: RuntimeUninstaller
    pulls: PullOrchestrator
    catalog: CatalogResolver
    app_state: AppStateStore
    reset: LifecycleResetOrchestrator
    updates: UpdateChecker

    async def close(self) -> None:
        await self.http_client.aclose()


def create_http_client(config: Settings = default_settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=config.http_connect_timeout,
            read=config.http_read_timeout,
            write=5.0,
            pool=5.0,
        )
    )


def build_services(
    http_client: httpx.AsyncClient | None = None,
    config: Settings = default_settings,
    locator: PlatformLocator | None = None,
) -> Services:
    http_client = http_client or create_http_client(config)
    locator = locator or PlatformLocator()

    probe = HealthProbe(config.runtime_host, http_client, timeout=config.health_timeout_seconds)
    runtime = RuntimeClient(config.runtime_host, http_client=http_client)
    supervisor = ServerSupervisor(
        probe,
        locator,
        poll_interval=config.startup_poll_interval_seconds,
        deadline=config.startup_deadline_seconds,
        status_every=config.startup_status_every,
    )
    installer = InstallationManager(
        locator,
        supervisor,
        default_install_strategies(
            locator,
            http_client,
            command_timeout=config.command_timeout_seconds,
            settle_seconds=config.install_settle_seconds,
            installer_settle_seconds=config.installer_settle_seconds,
        ),
    )
    uninstaller = RuntimeUninstaller(
        locator,
        supervisor,
        attempts=config.removal_attempts,
        backoff_seconds=config.removal_backoff_seconds,
        backoff_step_seconds=config.removal_backoff_step_seconds,
        command_timeout=config.command_timeout_seconds,
    )
    hub = HubClient(
        config.hub_base_url,
        http_client,
        user_agent=config.hub_user_agent,
        timeout=config.catalog_timeout_seconds,
    )
    catalog = CatalogResolver(
        hub,
        cache_ttl=config.catalog_cache_ttl_seconds,
        default_limit=config.catalog_default_limit,
    )
    app_state = AppStateStore(config.state_dir)

    return Services(
        http_client=http_client,
        locator=locator,
        probe=probe,
        runtime=runtime,
        supervisor=supervisor,
        installer=installer,
        uninstaller=uninstaller,
        pulls=PullOrchestrator(runtime, supervisor, installer, local_runtime=is_local_host(config.runtime_host)),
        catalog=catalog,
        app_state=app_state,
        reset=LifecycleResetOrchestrator(runtime, supervisor, installer, uninstaller, app_state, catalog),
        updates=UpdateChecker(locator, http_client, config.release_api_url),
    )
