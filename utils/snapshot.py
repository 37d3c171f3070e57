"""Helpers for the JSON data files the site renders."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import os
from pathlib import Path
import tempfile
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def format_short_date(value: datetime) -> str:
    """``Jan 30`` style date used next to list entries."""
    return f"{value:%b} {value.day}"


def parse_iso_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def write_snapshot(path: Path, field: str, items: list[dict[str, Any]], *, updated: str | None = None) -> dict[str, Any]:
    """Write ``{"updated": ..., field: items}`` and return the payload."""
    payload = {"updated": updated or utc_now_iso(), field: items}
    write_json_atomic(path, payload)
    return payload
