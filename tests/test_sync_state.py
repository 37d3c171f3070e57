from pathlib import Path
import json

import pytest

from utils.sync_state import (
    BOOKMARKS_KEYS_FIELD,
    BOOKS_KEYS_FIELD,
    StateCorruptError,
    SyncState,
    SyncStateStore,
    parse_state,
)


def test_missing_file_loads_empty_state(tmp_path: Path):
    store = SyncStateStore(tmp_path / "state.json", BOOKMARKS_KEYS_FIELD)
    state = store.load()
    assert state.synced_keys == []
    assert state.last_sync is None


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        json.dumps({"syncedUrls": "https://example.com"}),
        "",
    ],
)
def test_corrupt_file_loads_empty_state(tmp_path: Path, raw: str, capsys):
    path = tmp_path / "state.json"
    path.write_text(raw, encoding="utf-8")
    state = SyncStateStore(path, BOOKMARKS_KEYS_FIELD).load()
    assert state.synced_keys == []
    assert state.last_sync is None
    assert "starting fresh" in capsys.readouterr().out


def test_parse_state_drops_non_string_keys():
    state = parse_state({"syncedBooks": ["a|b", 3, None, "", "a|b"], "lastSync": 12}, BOOKS_KEYS_FIELD)
    assert state.synced_keys == ["a|b"]
    assert state.last_sync is None


def test_parse_state_rejects_wrong_shape():
    with pytest.raises(StateCorruptError):
        parse_state(["a"], BOOKS_KEYS_FIELD)


def test_record_is_idempotent():
    state = SyncState()
    assert SyncStateStore.record(state, "https://example.com/a") is True
    assert SyncStateStore.record(state, "https://example.com/a") is False
    assert state.synced_keys == ["https://example.com/a"]
    assert SyncStateStore.contains(state, "https://example.com/a") is True
    assert SyncStateStore.contains(state, "https://example.com/b") is False


def test_save_roundtrip_uses_field_names(tmp_path: Path):
    path = tmp_path / "nested" / "microblog-books-state.json"
    store = SyncStateStore(path, BOOKS_KEYS_FIELD)
    state = SyncState(synced_keys=["dune|frank herbert"], last_sync="2026-01-30T10:00:00Z")
    store.save(state)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {"syncedBooks": ["dune|frank herbert"], "lastSync": "2026-01-30T10:00:00Z"}
    assert store.load() == state
    assert list(path.parent.glob("*.tmp")) == []


def test_save_overwrites_previous_file(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"syncedUrls": ["old"], "lastSync": None}), encoding="utf-8")
    store = SyncStateStore(path, BOOKMARKS_KEYS_FIELD)

    state = store.load()
    store.record(state, "new")
    store.save(state)

    assert json.loads(path.read_text(encoding="utf-8"))["syncedUrls"] == ["old", "new"]
