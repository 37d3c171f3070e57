#!/usr/bin/env python3
"""Fetch recent Last.fm scrobbles into data/listening.json."""
from __future__ import annotations

import argparse
import sys
from typing import Any, Iterable
from urllib.parse import quote

import requests

import config as cfg
from utils.snapshot import write_snapshot

LASTFM_API_URL = "https://ws.audioscrobbler.com/2.0/"
OUTPUT_NAME = "listening.json"
DEFAULT_LIMIT = 10
USER_AGENT = "SiteDataSync/1.0"


def _log(message: str) -> None:
    print(message)


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("#text") or "")
    return str(value or "")


def spotify_search_url(artist: str, title: str) -> str:
    return f"https://open.spotify.com/search/{quote(f'{artist} {title}', safe='')}"


def large_image(images: Any) -> str | None:
    for image in images or []:
        if isinstance(image, dict) and image.get("size") == "large":
            return image.get("#text") or None
    return None


def track_entry(track: dict[str, Any]) -> dict[str, Any]:
    title = str(track.get("name") or "")
    artist = _text(track.get("artist"))
    attrs = track.get("@attr") or {}
    return {
        "title": title,
        "artist": artist,
        "album": _text(track.get("album")),
        "image": large_image(track.get("image")),
        "url": spotify_search_url(artist, title),
        "lastfmUrl": track.get("url"),
        "nowPlaying": attrs.get("nowplaying") == "true",
    }


def build_tracks(payload: dict[str, Any]) -> list[dict[str, Any]]:
    recent = payload.get("recenttracks") or {}
    tracks = recent.get("track") or []
    if isinstance(tracks, dict):
        tracks = [tracks]

    seen: set[str] = set()
    unique: list[dict[str, Any]] = []
    for track in tracks:
        if not isinstance(track, dict):
            continue
        entry = track_entry(track)
        key = f"{entry['title']}|{entry['artist']}"
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def fetch_recent_tracks(api_key: str, user: str, *, limit: int, timeout: float) -> dict[str, Any]:
    res = requests.get(
        LASTFM_API_URL,
        params={
            "method": "user.getrecenttracks",
            "user": user,
            "api_key": api_key,
            "format": "json",
            "limit": limit,
        },
        headers={"User-Agent": USER_AGENT},
        timeout=timeout,
    )
    try:
        data = res.json()
    except ValueError as exc:
        raise ValueError(f"Failed to parse response: {res.text[:200]}") from exc
    if not isinstance(data, dict):
        raise ValueError("Unexpected Last.fm payload")
    return data


def main(argv: Iterable[str], env=None) -> int:
    parser = argparse.ArgumentParser(description="Write recent Last.fm tracks to data/listening.json.")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="Tracks to request.")
    args = parser.parse_args(list(argv))

    api_key = cfg.get_env(cfg.LASTFM_API_KEY_ENV, env)
    if not api_key:
        _log(f"❌ Missing {cfg.LASTFM_API_KEY_ENV}")
        return 1
    user = cfg.get_env(cfg.LASTFM_USER_ENV, env) or cfg.DEFAULT_LASTFM_USER
    try:
        timeout = cfg.get_http_timeout(env)
    except cfg.ConfigError as exc:
        _log(f"❌ {exc}")
        return 1

    _log("🎧 Fetching Last.fm recent tracks...")
    try:
        payload = fetch_recent_tracks(api_key, user, limit=args.limit, timeout=timeout)
    except (requests.RequestException, ValueError) as exc:
        _log(f"❌ {exc}")
        return 1

    tracks = build_tracks(payload)
    output = cfg.get_data_dir(env) / OUTPUT_NAME
    write_snapshot(output, "tracks", tracks)

    _log(f"✅ Saved {len(tracks)} tracks to {OUTPUT_NAME}")
    _log("\n".join(f"  - {t['title']} by {t['artist']}" for t in tracks) or "  (no tracks yet)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
