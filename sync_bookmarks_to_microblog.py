#!/usr/bin/env python3
"""
Sync bookmarks from a Slack channel to Micro.blog.

Every link posted to the channel becomes a Micropub bookmark. Links already
pushed are remembered in data/microblog-bookmarks-state.json, so re-running
only publishes what is new.

Required environment variables:
    SLACK_BOT_TOKEN, SLACK_CHANNEL_ID, MICROBLOG_TOKEN
"""
from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Iterable

import config as cfg
from sync_pipeline import build_bookmark_pipeline


def _log(message: str) -> None:
    print(message)


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync Slack bookmarks to Micro.blog.")
    parser.add_argument("--state-file", help="State file (default: <SITE_DATA_DIR>/microblog-bookmarks-state.json).")
    parser.add_argument("--limit", type=int, help=f"Slack messages to read (default: {cfg.BOOKMARKS_HISTORY_LIMIT}).")
    parser.add_argument("--delay", type=float, help=f"Seconds between posts (default: {cfg.BOOKMARKS_DELAY_SECONDS}).")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds.")
    return parser.parse_args(list(argv))


def load_config(args: argparse.Namespace, env=None) -> cfg.BookmarkSyncConfig:
    config = cfg.load_bookmark_sync_config(env)
    if args.state_file:
        config = replace(config, state_path=Path(args.state_file).expanduser())
    return cfg.with_run_overrides(config, limit=args.limit, delay=args.delay, timeout=args.timeout)


def main(argv: Iterable[str], env=None) -> int:
    args = parse_args(argv)
    _log("🔖 Starting bookmark sync...")

    try:
        config = load_config(args, env)
    except cfg.ConfigError as exc:
        _log(f"❌ {exc}")
        _log(f"   Get a Micro.blog token from: {cfg.MICROBLOG_APPS_URL}")
        return 1

    summary = build_bookmark_pipeline(config).run()
    _log(summary.describe("bookmarks"))
    return 1 if summary.aborted else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
