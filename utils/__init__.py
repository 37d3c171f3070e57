"""Reexports the helpers shared by the sync and fetch scripts."""

from utils.enrichment import EnrichmentError, enrich_book, enrich_candidate, resolve_bookmark_title
from utils.extract import (
    BookCandidate,
    BookmarkCandidate,
    extract_bookmarks,
    extract_books,
    parse_book_from_text,
    parse_bookmark_links,
)
from utils.microblog import PublishError, PublishResult, publish_book, publish_bookmark
from utils.slack_history import RawMessage, UpstreamFetchError, fetch_messages
from utils.snapshot import format_short_date, utc_now_iso, write_json_atomic, write_snapshot
from utils.sync_state import StateCorruptError, SyncState, SyncStateStore

__all__ = [
    "BookCandidate",
    "BookmarkCandidate",
    "EnrichmentError",
    "PublishError",
    "PublishResult",
    "RawMessage",
    "StateCorruptError",
    "SyncState",
    "SyncStateStore",
    "UpstreamFetchError",
    "enrich_book",
    "enrich_candidate",
    "extract_bookmarks",
    "extract_books",
    "fetch_messages",
    "format_short_date",
    "parse_book_from_text",
    "parse_bookmark_links",
    "publish_book",
    "publish_bookmark",
    "resolve_bookmark_title",
    "utc_now_iso",
    "write_json_atomic",
    "write_snapshot",
]
