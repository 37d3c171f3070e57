#!/usr/bin/env python3
"""Fetch Micro.blog posts tagged "Now" into data/microblog.json."""
from __future__ import annotations

import argparse
import sys
from typing import Any, Iterable

import requests

import config as cfg
from utils.snapshot import format_short_date, parse_iso_datetime, write_snapshot

NOW_TAG = "Now"
OUTPUT_NAME = "microblog.json"


def _log(message: str) -> None:
    print(message)


def is_tagged(item: dict[str, Any], tag: str = NOW_TAG) -> bool:
    tags = item.get("tags") or []
    return isinstance(tags, list) and tag in tags


def post_entry(item: dict[str, Any]) -> dict[str, Any]:
    published = item.get("date_published")
    date = parse_iso_datetime(published)
    return {
        "id": item.get("id"),
        "title": item.get("title") or None,
        "content": item.get("content_html"),
        "date": published,
        "dateFormatted": format_short_date(date) if date else None,
        "url": item.get("url"),
    }


def build_posts(feed: dict[str, Any], tag: str = NOW_TAG) -> list[dict[str, Any]]:
    items = feed.get("items") or []
    return [post_entry(item) for item in items if isinstance(item, dict) and is_tagged(item, tag)]


def fetch_feed(url: str, *, timeout: float) -> dict[str, Any]:
    res = requests.get(url, timeout=timeout)
    res.raise_for_status()
    data = res.json()
    if not isinstance(data, dict):
        raise ValueError("Unexpected feed payload")
    return data


def main(argv: Iterable[str], env=None) -> int:
    parser = argparse.ArgumentParser(description=f'Write Micro.blog posts tagged "{NOW_TAG}" to data/microblog.json.')
    parser.add_argument("--feed-url", default=None, help="JSON feed URL (default: MICROBLOG_FEED_URL).")
    parser.add_argument("--tag", default=NOW_TAG, help=f"Tag to keep (default: {NOW_TAG}).")
    args = parser.parse_args(list(argv))

    feed_url = args.feed_url or cfg.get_env(cfg.MICROBLOG_FEED_URL_ENV, env) or cfg.DEFAULT_MICROBLOG_FEED_URL

    _log("📰 Fetching micro.blog feed...")
    try:
        feed = fetch_feed(feed_url, timeout=cfg.get_http_timeout(env))
    except (cfg.ConfigError, requests.RequestException, ValueError) as exc:
        _log(f"❌ Error fetching micro.blog: {exc}")
        return 1

    if not feed.get("items"):
        _log("📰 No posts found")
        return 0

    posts = build_posts(feed, args.tag)
    if not posts:
        _log(f'📰 No posts with "{args.tag}" tag found')
        return 0

    _log(f'📰 Found {len(posts)} post(s) tagged "{args.tag}"')
    write_snapshot(cfg.get_data_dir(env) / OUTPUT_NAME, "posts", posts)
    _log(f"✅ Saved {len(posts)} posts to {OUTPUT_NAME}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
