import pytest

from studio.schemas.runtime import InstallationOutcome
from studio.services.app_state import AppStateStore
from studio.services.reset import RESET_COMPLETE_MESSAGE, LifecycleResetOrchestrator
from studio.services.runtime.client import RuntimeClient
from studio.services.runtime.installer import InstallationManager
from studio.services.runtime.uninstaller import RuntimeUninstaller
from tests.mocks.sandbox import RUNTIME_HOST


class StubInstaller:
    def __init__(self, installed=True):
        self.installed = installed

    def is_installed(self):
        return self.installed


class StubSupervisor:
    def __init__(self, starts=False, on_start=None):
        self.starts = starts
        self.on_start = on_start
        self.calls = 0

    async def ensure_running(self, on_status=None):
        self.calls += 1
        if self.starts and self.on_start:
            self.on_start()
        return self.starts


class StubUninstaller:
    def __init__(self, outcome=None, has_data=False):
        self.outcome = outcome or InstallationOutcome(success=True, message="Ollama uninstalled")
        self.has_data = has_data
        self.calls = 0

    def has_runtime_data(self):
        return self.has_data

    async def uninstall(self, on_status=None):
        self.calls += 1
        return self.outcome


class StubCatalog:
    def __init__(self):
        self.invalidated = False

    def invalidate(self):
        self.invalidated = True


@pytest.fixture
def app_state(tmp_path):
    store = AppStateStore(tmp_path / "state")
    store.update(first_run=False, mode="power")
    (store.cache_dir / "catalog").mkdir(parents=True)
    (store.cache_dir / "catalog" / "top.json").write_text("[]")
    return store


@pytest.fixture
def runtime(http_client):
    return RuntimeClient(RUNTIME_HOST, http_client=http_client)


def _orchestrator(runtime, app_state, installer=None, supervisor=None, uninstaller=None, catalog=None):
    return LifecycleResetOrchestrator(
        runtime,
        supervisor or StubSupervisor(),
        installer or StubInstaller(),
        uninstaller or StubUninstaller(),
        app_state,
        catalog,
    )


async def test_reset_everything_happy_path(runtime, app_state, fake_ollama):
    fake_ollama.state.installed = ["llama3.2:1b", "mistral:7b"]
    uninstaller = StubUninstaller()
    catalog = StubCatalog()
    orchestrator = _orchestrator(runtime, app_state, uninstaller=uninstaller, catalog=catalog)
    messages = []

    result = await orchestrator.reset_everything(messages.append)

    assert result.success is True
    assert result.message == RESET_COMPLETE_MESSAGE
    assert fake_ollama.state.installed == []
    assert uninstaller.calls == 1
    assert catalog.invalidated
    assert not app_state.cache_dir.exists()
    state = app_state.load()
    assert state.first_run is True
    assert state.mode is None
    assert messages == [
        "Deleting all models...",
        "Deleting llama3.2:1b...",
        "Deleting mistral:7b...",
        "All models deleted",
        "Clearing app data...",
        "Reset complete!",
    ]


async def test_failed_delete_does_not_stop_the_others(runtime, app_state, fake_ollama):
    fake_ollama.state.installed = ["a:1b", "b:1b", "c:1b"]
    fake_ollama.state.fail_delete = {"b:1b"}
    uninstaller = StubUninstaller()
    orchestrator = _orchestrator(runtime, app_state, uninstaller=uninstaller)
    messages = []

    result = await orchestrator.reset_everything(messages.append)

    assert fake_ollama.state.installed == ["b:1b"]
    assert uninstaller.calls == 1
    assert result.success is False
    assert "b:1b" in result.message
    assert "Deleted 2 of 3 models" in messages
    assert messages[-1] == "Reset finished with problems"
    assert app_state.load().first_run is True


async def test_enumeration_failure_aborts_before_uninstall(runtime, app_state, fake_ollama):
    fake_ollama.state.running = False
    supervisor = StubSupervisor(starts=False)
    uninstaller = StubUninstaller()
    orchestrator = _orchestrator(runtime, app_state, supervisor=supervisor, uninstaller=uninstaller)

    result = await orchestrator.reset_everything()

    assert result.success is False
    assert result.message == "Failed to delete models: the installed models could not be listed."
    assert supervisor.calls == 1
    assert uninstaller.calls == 0
    assert app_state.load().mode == "power"


async def test_stopped_runtime_is_started_to_enumerate(runtime, app_state, fake_ollama):
    fake_ollama.state.running = False
    fake_ollama.state.installed = ["llama3.2:1b"]

    def start():
        fake_ollama.state.running = True

    orchestrator = _orchestrator(runtime, app_state, supervisor=StubSupervisor(starts=True, on_start=start))

    result = await orchestrator.delete_all()

    assert result.success is True
    assert fake_ollama.state.installed == []


async def test_absent_runtime_without_data_means_no_models(runtime, app_state, fake_ollama):
    fake_ollama.state.running = False
    supervisor = StubSupervisor()
    uninstaller = StubUninstaller(has_data=False)
    orchestrator = _orchestrator(
        runtime, app_state, installer=StubInstaller(installed=False), supervisor=supervisor, uninstaller=uninstaller
    )

    result = await orchestrator.reset_everything()

    assert result.success is True
    assert supervisor.calls == 0
    assert uninstaller.calls == 1


async def test_unlistable_models_with_data_on_disk_abort(runtime, app_state, fake_ollama):
    fake_ollama.state.running = False
    uninstaller = StubUninstaller(has_data=True)
    orchestrator = _orchestrator(
        runtime, app_state, installer=StubInstaller(installed=False), uninstaller=uninstaller
    )

    result = await orchestrator.reset_everything()

    assert result.success is False
    assert result.message == "Failed to delete models: the installed models could not be listed."
    assert uninstaller.calls == 0
    assert app_state.load().first_run is False


async def test_reset_keeps_model_blobs_of_a_runtime_it_cannot_find(
    runtime, app_state, fake_ollama, make_locator, sandbox_home
):
    fake_ollama.state.running = False
    blob = sandbox_home / ".ollama" / "models" / "blobs" / "sha256-abc"
    blob.parent.mkdir(parents=True)
    blob.write_bytes(b"weights")
    locator = make_locator("linux")
    supervisor = StubSupervisor()
    uninstaller = RuntimeUninstaller(locator, supervisor, strategies=[], backoff_seconds=0.0, backoff_step_seconds=0.0)
    installer = InstallationManager(locator, supervisor, [])
    orchestrator = _orchestrator(runtime, app_state, installer=installer, supervisor=supervisor, uninstaller=uninstaller)

    result = await orchestrator.reset_everything()

    assert result.success is False
    assert blob.exists()
    assert supervisor.calls == 0


async def test_uninstall_failure_is_reported_after_deletes(runtime, app_state, fake_ollama):
    fake_ollama.state.installed = ["llama3.2:1b"]
    uninstaller = StubUninstaller(InstallationOutcome(success=False, message="Failed to remove /opt/ollama."))
    orchestrator = _orchestrator(runtime, app_state, uninstaller=uninstaller)

    result = await orchestrator.reset_everything()

    assert result.success is False
    assert result.message == "Models deleted, but Failed to remove /opt/ollama."
    assert fake_ollama.state.installed == []
    assert app_state.load().first_run is True


async def test_uninstall_alone(runtime, app_state):
    result = await _orchestrator(runtime, app_state).uninstall()
    assert result.success is True
    assert result.message == "Ollama uninstalled"
