#!/usr/bin/env python3
"""
Sync books from a Slack channel to a Micro.blog bookshelf.

Messages like "📚 Currently reading: Breakneck by Dan Wang" are added to the
"Currently Reading" shelf, with an ISBN looked up on Open Library when one is
found. Synced books are remembered in data/microblog-books-state.json.

Required environment variables:
    SLACK_BOT_TOKEN, SLACK_READING_CHANNEL_ID (or SLACK_CHANNEL_ID), MICROBLOG_TOKEN
Optional:
    MICROBLOG_BOOKSHELF_ID (otherwise the "Currently Reading" shelf is looked up)
"""
from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Iterable

import requests

import config as cfg
from sync_pipeline import build_book_pipeline
from utils.microblog import fetch_bookshelves, find_currently_reading_shelf, shelf_id


def _log(message: str) -> None:
    print(message)


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync Slack books to a Micro.blog bookshelf.")
    parser.add_argument("--state-file", help="State file (default: <SITE_DATA_DIR>/microblog-books-state.json).")
    parser.add_argument("--bookshelf-id", help="Target bookshelf (default: MICROBLOG_BOOKSHELF_ID or lookup).")
    parser.add_argument("--limit", type=int, help=f"Slack messages to read (default: {cfg.BOOKS_HISTORY_LIMIT}).")
    parser.add_argument("--delay", type=float, help=f"Seconds between posts (default: {cfg.BOOKS_DELAY_SECONDS}).")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds.")
    return parser.parse_args(list(argv))


def load_config(args: argparse.Namespace, env=None) -> cfg.BookSyncConfig:
    config = cfg.load_book_sync_config(env)
    if args.state_file:
        config = replace(config, state_path=Path(args.state_file).expanduser())
    if args.bookshelf_id:
        config = replace(config, bookshelf_id=args.bookshelf_id)
    return cfg.with_run_overrides(config, limit=args.limit, delay=args.delay, timeout=args.timeout)


def resolve_bookshelf_id(config: cfg.BookSyncConfig, *, session: requests.Session) -> str:
    """Return the configured shelf, or the "Currently Reading" one from Micro.blog."""
    if config.bookshelf_id:
        return config.bookshelf_id

    _log("📚 No MICROBLOG_BOOKSHELF_ID provided, fetching bookshelves...")
    shelves = fetch_bookshelves(token=config.microblog_token, timeout=config.timeout, session=session)
    _log("Available bookshelves:")
    for shelf in shelves:
        _log(f"  - {shelf.get('title')}: {shelf_id(shelf)}")

    found = find_currently_reading_shelf(shelves)
    if not found:
        raise cfg.ConfigError(f"Could not find bookshelf. Set {cfg.MICROBLOG_BOOKSHELF_ID_ENV} manually.")
    _log(f'📚 Using "Currently Reading" shelf: {found}')
    return found


def main(argv: Iterable[str], env=None) -> int:
    args = parse_args(argv)
    _log("📚 Starting book sync...")

    try:
        config = load_config(args, env)
    except cfg.ConfigError as exc:
        _log(f"❌ {exc}")
        _log(f"   Get a Micro.blog token from: {cfg.MICROBLOG_APPS_URL}")
        return 1

    session = requests.Session()
    try:
        bookshelf_id = resolve_bookshelf_id(config, session=session)
    except cfg.ConfigError as exc:
        _log(f"❌ {exc}")
        return 1
    except (requests.RequestException, ValueError) as exc:
        _log(f"❌ Failed to get bookshelves: {exc}")
        return 1

    summary = build_book_pipeline(config, bookshelf_id, session=session).run()
    _log(summary.describe("books"))
    return 1 if summary.aborted else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
