#!/usr/bin/env python3
"""
Fetch bookmarks from a Slack channel into data/bookmarks.json.

Setup:
1. Create a Slack app with the channels:history (or groups:history) scope.
2. Install it to the workspace and invite the bot to the bookmarks channel.
3. Export SLACK_BOT_TOKEN and SLACK_CHANNEL_ID.

Run with --sample to write placeholder data without Slack credentials.
"""
from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys
from typing import Callable, Iterable, Sequence

import requests

import config as cfg
from utils.enrichment import resolve_bookmark_title
from utils.extract import BookmarkCandidate, extract_bookmarks
from utils.slack_history import RawMessage, UpstreamFetchError, fetch_messages
from utils.snapshot import format_short_date, write_snapshot

OUTPUT_NAME = "bookmarks.json"
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _log(message: str) -> None:
    print(message)


def bookmark_entry(candidate: BookmarkCandidate, *, fallback_date: datetime) -> dict:
    posted = candidate.posted_at or fallback_date
    return {
        "url": candidate.url,
        "title": candidate.title or candidate.url,
        "date": posted.isoformat().replace("+00:00", "Z"),
        "dateFormatted": format_short_date(posted),
    }


def build_bookmarks(
    messages: Sequence[RawMessage],
    *,
    resolve: Callable[[BookmarkCandidate], BookmarkCandidate],
    now: datetime | None = None,
) -> list[dict]:
    now = now or datetime.now(timezone.utc)
    candidates = [resolve(candidate) for candidate in extract_bookmarks(messages)]
    candidates.sort(key=lambda c: c.posted_at or _EPOCH, reverse=True)
    return [bookmark_entry(candidate, fallback_date=now) for candidate in candidates]


def sample_bookmarks(now: datetime | None = None) -> list[dict]:
    now = now or datetime.now(timezone.utc)
    samples = [
        BookmarkCandidate("https://example.com/article-1", "Sample Article 1", now),
        BookmarkCandidate("https://example.com/article-2", "Sample Article 2", now - timedelta(days=1)),
    ]
    return [bookmark_entry(candidate, fallback_date=now) for candidate in samples]


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write recent Slack bookmarks to data/bookmarks.json.")
    parser.add_argument("--output", help=f"Output file (default: <SITE_DATA_DIR>/{OUTPUT_NAME}).")
    parser.add_argument("--limit", type=int, default=cfg.BOOKMARKS_HISTORY_LIMIT, help="Slack messages to read.")
    parser.add_argument("--sample", action="store_true", help="Write sample data when Slack is not configured.")
    return parser.parse_args(list(argv))


def main(argv: Iterable[str], env=None) -> int:
    args = parse_args(argv)
    output = Path(args.output).expanduser() if args.output else cfg.get_data_dir(env) / OUTPUT_NAME

    try:
        slack = cfg.load_slack_source(env, limit=args.limit)
        timeout = cfg.get_http_timeout(env)
    except cfg.ConfigError as exc:
        _log(f"❌ {exc}")
        if not args.sample:
            _log("   To test with sample data, run with --sample")
            return 1
        write_snapshot(output, "bookmarks", sample_bookmarks())
        _log(f"🧪 Sample data written to {output}")
        return 0

    session = requests.Session()
    _log("💬 Fetching messages from Slack...")
    try:
        messages = fetch_messages(slack.channel_id, slack.limit, token=slack.token, timeout=timeout, session=session)
    except UpstreamFetchError as exc:
        _log(f"❌ {exc}")
        return 1
    _log(f"💬 Found {len(messages)} messages")

    bookmarks = build_bookmarks(messages, resolve=lambda c: resolve_bookmark_title(c, session=session))
    write_snapshot(output, "bookmarks", bookmarks)
    _log(f"✅ {len(bookmarks)} bookmarks written to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
