"""Tests for loading, archiving and saving data.json."""

import json

import pytest

from slidestate import storage as storage_module
from slidestate.models import AppState, LibrarySource, Scene, Tag, WeightGroup
from slidestate.storage import AppStorage, archive_file

VERSION = "3.1.0"


def archived(data_dir):
    return sorted(p.name for p in data_dir.glob("data.json.*"))


def write_data(data_dir, payload):
    path = data_dir / "data.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return path


# ── Load ─────────────────────────────────────────────────────


def test_load_missing_file_gives_default(data_dir):
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()
    assert state == AppState.default(VERSION)
    assert not (data_dir / "data.json").exists()


def test_load_creates_save_dir(data_dir):
    nested = data_dir / "nested" / "dir"
    storage = AppStorage(nested, primary=True, app_version=VERSION)
    storage.load()
    storage.load()
    assert nested.is_dir()


def test_load_unreadable_file_archives_it(data_dir):
    write_data(data_dir, "{this is not json")
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()

    assert state == AppState.default(VERSION)
    assert not (data_dir / "data.json").exists()
    names = archived(data_dir)
    assert len(names) == 1
    assert names[0].removeprefix("data.json.").isdigit()


def test_load_non_object_archives_it(data_dir):
    write_data(data_dir, "[]")
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()
    assert state.scenes == []
    assert len(archived(data_dir)) == 1


def test_load_migration_failure_archives_it(data_dir):
    write_data(data_dir, {
        "version": "2.2.0",
        "scenes": [{
            "id": 1, "name": "Broken",
            "sceneWeights": json.dumps([[42, {"type": "weight", "value": 1}]]),
        }],
        "library": [],
        "tags": [],
    })
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()
    assert state == AppState.default(VERSION)
    assert len(archived(data_dir)) == 1


def test_load_failure_is_archived_for_secondary_too(data_dir):
    write_data(data_dir, "garbage")
    AppStorage(data_dir, primary=False, app_version=VERSION).load()
    assert len(archived(data_dir)) == 1


def test_load_legacy_keeps_original_on_disk(data_dir):
    original = {
        "scenes": [
            {"id": 1, "name": "A", "directories": ["/a", "/b"]},
            {"id": 2, "name": "B", "directories": ["/b", "/c"]},
        ],
    }
    write_data(data_dir, original)
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()

    assert state.version == VERSION
    assert [(s.url, s.id) for s in state.library] == [("/a", 0), ("/b", 1), ("/c", 2)]
    names = archived(data_dir)
    assert len(names) == 1
    assert json.loads((data_dir / names[0]).read_text()) == original


def test_secondary_leaves_legacy_original_in_place(data_dir):
    original = {"scenes": [{"id": 1, "name": "A", "directories": ["/a"]}]}
    write_data(data_dir, original)

    state = AppStorage(data_dir, primary=False, app_version=VERSION).load()
    assert [s.url for s in state.library] == ["/a"]
    assert json.loads((data_dir / "data.json").read_text()) == original
    assert archived(data_dir) == []

    AppStorage(data_dir, primary=True, app_version=VERSION).load()
    assert len(archived(data_dir)) == 1


def test_load_early_version(data_dir):
    write_data(data_dir, {
        "version": "3.0.0-beta1",
        "scenes": [{
            "id": 1, "name": "Gen",
            "tagWeights": json.dumps([
                [{"id": 1, "name": "A"}, {"type": "weight", "value": 1}],
                [{"id": 2, "name": "B"}, {"type": "weight", "value": 1}],
                [{"id": 3, "name": "C"}, {"type": "weight", "value": 1}],
            ]),
        }],
        "library": [{"id": 5, "url": "/x"}],
        "tags": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}, {"id": 3, "name": "C"}],
    })
    state = AppStorage(data_dir, primary=True, app_version=VERSION).load()
    weights = state.scenes[0].generator_weights
    assert [(g.name, g.percent) for g in weights] == [("A", 34), ("B", 33), ("C", 33)]
    assert state.library[0].id == 0
    assert archived(data_dir) == []


# ── Save / round trip ────────────────────────────────────────


@pytest.fixture
def sample_state():
    red = Tag(id=1, name="Red")
    return AppState(
        version=VERSION,
        tags=[red],
        library=[LibrarySource(id=0, url="/a", tags=[red]), LibrarySource(id=1, url="/b")],
        scenes=[Scene(
            id=1, name="Gen", zoom=True, zoom_start=2,
            generator_weights=[WeightGroup(percent=100, name="Red", tag=red)],
        )],
        open_tab=2,
        tutorial="done",
    )


def test_save_then_load_round_trip(data_dir, sample_state):
    storage = AppStorage(data_dir, primary=True, app_version=VERSION)
    assert storage.save(sample_state) is True

    loaded = AppStorage(data_dir, primary=True, app_version=VERSION).load()
    assert loaded == sample_state
    assert archived(data_dir) == []


def test_save_stamps_missing_version(data_dir):
    source = LibrarySource(url="/a")
    state = AppState(scenes=[Scene(id=1, sources=[source])], library=[source])
    storage = AppStorage(data_dir, primary=True, app_version=VERSION)
    storage.save(state)

    assert state.version == VERSION
    assert json.loads((data_dir / "data.json").read_text())["version"] == VERSION
    loaded = storage.load()
    assert [s.url for s in loaded.library] == ["/a"]
    assert [s.url for s in loaded.scenes[0].sources] == ["/a"]
    assert archived(data_dir) == []


def test_unknown_keys_survive_load_and_save(data_dir):
    write_data(data_dir, {
        "version": VERSION,
        "remoteSync": {"enabled": True},
        "scenes": [{"id": 1, "name": "S", "timingFunction": "ease", "overlays": [{"id": 2}]}],
        "library": [{"id": 0, "url": "/a", "count": 7}],
    })
    storage = AppStorage(data_dir, primary=True, app_version=VERSION)
    storage.save(storage.load())

    payload = json.loads((data_dir / "data.json").read_text())
    assert payload["remoteSync"] == {"enabled": True}
    assert payload["scenes"][0]["timingFunction"] == "ease"
    assert payload["scenes"][0]["overlays"] == [{"id": 2}]
    assert payload["library"][0]["count"] == 7


def test_save_writes_camel_case(data_dir, sample_state):
    AppStorage(data_dir, primary=True, app_version=VERSION).save(sample_state)
    payload = json.loads((data_dir / "data.json").read_text())
    assert payload["version"] == VERSION
    assert payload["openTab"] == 2
    assert payload["scenes"][0]["generatorWeights"][0]["percent"] == 100
    assert payload["scenes"][0]["tagWeights"] is None


def test_save_overwrites_in_place(data_dir, sample_state):
    storage = AppStorage(data_dir, primary=True, app_version=VERSION)
    storage.save(AppState.default(VERSION))
    storage.save(sample_state)
    assert archived(data_dir) == []
    payload = json.loads((data_dir / "data.json").read_text())
    assert len(payload["scenes"]) == 1


def test_secondary_does_not_save(data_dir, sample_state):
    storage = AppStorage(data_dir, primary=False, app_version=VERSION)
    assert storage.save(sample_state) is False
    assert not (data_dir / "data.json").exists()


def test_save_failure_propagates(data_dir, sample_state):
    storage = AppStorage(data_dir / "missing", primary=True, app_version=VERSION)
    with pytest.raises(OSError):
        storage.save(sample_state)


# ── Backup / archive ─────────────────────────────────────────


def test_backup_archives_current_file(data_dir, sample_state):
    storage = AppStorage(data_dir, primary=True, app_version=VERSION)
    storage.save(sample_state)
    target = storage.backup()

    assert target is not None
    assert target.name.startswith("data.json.")
    assert not (data_dir / "data.json").exists()
    assert AppState.model_validate_json(target.read_text()) == sample_state


def test_backup_without_file(data_dir):
    assert AppStorage(data_dir, primary=True, app_version=VERSION).backup() is None


def test_secondary_does_not_backup(data_dir):
    write_data(data_dir, "{}")
    assert AppStorage(data_dir, primary=False, app_version=VERSION).backup() is None
    assert (data_dir / "data.json").exists()


def test_archive_file_uses_epoch_millis(data_dir, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.5)
    path = write_data(data_dir, "{}")
    target = archive_file(path)
    assert target.name == "data.json.1700000000500"


def test_archive_file_never_overwrites(data_dir, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.5)
    (data_dir / "data.json.1700000000500").write_text("older")
    path = write_data(data_dir, "{}")
    target = archive_file(path)
    assert target.name == "data.json.1700000000501"
    assert (data_dir / "data.json.1700000000500").read_text() == "older"


def test_archive_missing_file(data_dir):
    assert archive_file(data_dir / "data.json") is None
