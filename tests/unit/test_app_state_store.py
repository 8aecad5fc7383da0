from studio.schemas.app_state import AppState
from studio.services.app_state import AppStateStore


def test_missing_file_reads_as_defaults(tmp_path):
    store = AppStateStore(tmp_path / "state")
    assert store.load() == AppState(first_run=True, mode=None)


def test_corrupt_file_reads_as_defaults(tmp_path):
    store = AppStateStore(tmp_path)
    store.state_path.write_text("{not json")
    assert store.load() == AppState()


def test_update_persists(tmp_path):
    store = AppStateStore(tmp_path / "state")
    store.update(first_run=False, mode="beginner")

    reloaded = AppStateStore(tmp_path / "state").load()
    assert reloaded.first_run is False
    assert reloaded.mode == "beginner"
    assert not store.state_path.with_suffix(".tmp").exists()


def test_mark_first_run_forgets_mode(tmp_path):
    store = AppStateStore(tmp_path)
    store.update(first_run=False, mode="power")

    state = store.mark_first_run()

    assert state.first_run is True
    assert state.mode is None
    assert store.load() == state


def test_clear_cache(tmp_path):
    store = AppStateStore(tmp_path)
    assert store.clear_cache() is True

    (store.cache_dir / "nested").mkdir(parents=True)
    (store.cache_dir / "nested" / "blob").write_bytes(b"x")
    assert store.clear_cache() is True
    assert not store.cache_dir.exists()
