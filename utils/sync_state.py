"""Persistent record of what a sync pipeline already published.

Stored as a small JSON file per pipeline:

    {"syncedUrls": ["https://..."], "lastSync": "2026-01-30T10:00:00Z"}

The key list only grows; a key is added once its item was published.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

from utils.snapshot import write_json_atomic

BOOKMARKS_KEYS_FIELD = "syncedUrls"
BOOKS_KEYS_FIELD = "syncedBooks"
LAST_SYNC_FIELD = "lastSync"


class StateCorruptError(ValueError):
    """The state file exists but cannot be trusted."""


def _log(message: str) -> None:
    print(message)


@dataclass
class SyncState:
    synced_keys: list[str] = field(default_factory=list)
    last_sync: str | None = None
    _index: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        unique: list[str] = []
        for key in self.synced_keys:
            if key in self._index:
                continue
            self._index.add(key)
            unique.append(key)
        self.synced_keys = unique

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self.synced_keys)

    def add(self, key: str) -> bool:
        if key in self._index:
            return False
        self._index.add(key)
        self.synced_keys.append(key)
        return True


def parse_state(payload: Any, keys_field: str) -> SyncState:
    if not isinstance(payload, dict):
        raise StateCorruptError("state is not a JSON object")

    raw_keys = payload.get(keys_field, [])
    if not isinstance(raw_keys, list):
        raise StateCorruptError(f"{keys_field} is not a list")

    keys = [key for key in raw_keys if isinstance(key, str) and key]
    last_sync = payload.get(LAST_SYNC_FIELD)
    return SyncState(synced_keys=keys, last_sync=last_sync if isinstance(last_sync, str) else None)


class SyncStateStore:
    """Load and save one pipeline's state file."""

    def __init__(self, path: Path, keys_field: str):
        self.path = Path(path)
        self.keys_field = keys_field

    def load(self) -> SyncState:
        if not self.path.exists():
            return SyncState()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return parse_state(payload, self.keys_field)
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError and StateCorruptError are both ValueErrors.
            _log(f"⚠️  Could not load state file {self.path.name} ({exc}); starting fresh")
            return SyncState()

    @staticmethod
    def contains(state: SyncState, key: str) -> bool:
        return key in state

    @staticmethod
    def record(state: SyncState, key: str) -> bool:
        return state.add(key)

    def to_payload(self, state: SyncState) -> dict[str, Any]:
        return {self.keys_field: list(state.synced_keys), LAST_SYNC_FIELD: state.last_sync}

    def save(self, state: SyncState) -> None:
        write_json_atomic(self.path, self.to_payload(state))
