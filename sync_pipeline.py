#!/usr/bin/env python3
"""
SyncPipeline - incremental Slack -> Micro.blog sync.

One run: load state, read the channel, extract candidates, drop the ones
already published, then enrich and publish the rest one at a time. Every
successful item is recorded; the state file is written once at the end.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Callable, Generic, Sequence, TypeVar

import requests

from config import BookmarkSyncConfig, BookSyncConfig
from utils.enrichment import enrich_candidate
from utils.extract import BookCandidate, BookmarkCandidate, extract_bookmarks, extract_books
from utils.microblog import PublishResult, publish_book, publish_bookmark
from utils.slack_history import RawMessage, UpstreamFetchError, fetch_messages
from utils.snapshot import utc_now_iso
from utils.sync_state import BOOKMARKS_KEYS_FIELD, BOOKS_KEYS_FIELD, SyncState, SyncStateStore

C = TypeVar("C", BookmarkCandidate, BookCandidate)


class RunState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    DIFFING = "diffing"
    PUBLISHING = "publishing"
    PERSISTING = "persisting"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunSummary:
    extracted: int = 0
    new: int = 0
    succeeded: int = 0
    failed: int = 0
    state: RunState = RunState.IDLE
    error: str | None = None
    results: list[PublishResult] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.state is RunState.ABORTED

    def describe(self, noun: str) -> str:
        counts = (
            f"{self.extracted} {noun} extracted, "
            f"{self.new} new, "
            f"{self.succeeded} synced, "
            f"{self.failed} failed"
        )
        if self.aborted:
            return f"❌ Sync aborted: {self.error} ({counts})."
        return f"📌 Result: {counts}."


def _log(message: str) -> None:
    print(message)


class SyncPipeline(Generic[C]):
    """Run one incremental sync with pluggable fetch/extract/enrich/publish steps."""

    def __init__(
        self,
        *,
        store: SyncStateStore,
        fetch: Callable[[], Sequence[RawMessage]],
        extract: Callable[[Sequence[RawMessage]], list[C]],
        enrich: Callable[[C], C],
        publish: Callable[[C], PublishResult],
        describe: Callable[[C], str] = str,
        delay_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.store = store
        self.fetch = fetch
        self.extract = extract
        self.enrich = enrich
        self.publish = publish
        self.describe = describe
        self.delay_seconds = delay_seconds
        self.sleep = sleep
        self.clock = clock
        self.status = RunState.IDLE

    # -------- public API --------
    def run(self) -> RunSummary:
        summary = RunSummary()

        self._enter(RunState.LOADING)
        state = self.store.load()
        _log(f"🗂️  Previously synced {len(state)} items")

        self._enter(RunState.FETCHING)
        try:
            messages = self.fetch()
        except UpstreamFetchError as exc:
            self._enter(RunState.ABORTED)
            summary.state = self.status
            summary.error = str(exc)
            return summary
        _log(f"💬 Found {len(messages)} messages")

        self._enter(RunState.EXTRACTING)
        candidates = self.extract(messages)
        summary.extracted = len(candidates)

        self._enter(RunState.DIFFING)
        fresh = self.pending(candidates, state)
        summary.new = len(fresh)
        _log(f"🆕 {len(fresh)} new items to sync")

        self._enter(RunState.PUBLISHING)
        try:
            for index, candidate in enumerate(fresh):
                if index:
                    self.sleep(self.delay_seconds)
                result = self._attempt(candidate)
                summary.results.append(result)
                if result.success:
                    self.store.record(state, result.key)
                    summary.succeeded += 1
                else:
                    summary.failed += 1
                    _log(f"❌ Failed to sync {self.describe(candidate)}: {result.error}")
        finally:
            # Items already published stay recorded even if the loop is interrupted.
            self._enter(RunState.PERSISTING)
            state.last_sync = self.clock()
            self.store.save(state)

        self._enter(RunState.DONE)
        summary.state = self.status
        return summary

    def pending(self, candidates: Sequence[C], state: SyncState) -> list[C]:
        return [c for c in candidates if not self.store.contains(state, c.key)]

    # -------- internals --------
    def _enter(self, status: RunState) -> None:
        self.status = status

    def _attempt(self, candidate: C) -> PublishResult:
        try:
            enriched = self.enrich(candidate)
            _log(f"📤 Syncing {self.describe(enriched)}")
            return self.publish(enriched)
        except Exception as exc:
            return PublishResult(key=candidate.key, success=False, error=str(exc) or exc.__class__.__name__)


def describe_bookmark(candidate: BookmarkCandidate) -> str:
    return candidate.url


def describe_book(candidate: BookCandidate) -> str:
    return f'"{candidate.title}" by {candidate.author or "Unknown"}'


def build_bookmark_pipeline(
    config: BookmarkSyncConfig,
    *,
    session: requests.Session | None = None,
    **overrides,
) -> SyncPipeline[BookmarkCandidate]:
    http = session or requests.Session()
    slack = config.slack
    return SyncPipeline(
        store=SyncStateStore(config.state_path, BOOKMARKS_KEYS_FIELD),
        fetch=lambda: fetch_messages(
            slack.channel_id, slack.limit, token=slack.token, timeout=config.timeout, session=http
        ),
        extract=extract_bookmarks,
        enrich=lambda c: enrich_candidate(c, timeout=config.timeout, session=http),
        publish=lambda c: publish_bookmark(c, token=config.microblog_token, timeout=config.timeout, session=http),
        describe=describe_bookmark,
        delay_seconds=config.delay_seconds,
        **overrides,
    )


def build_book_pipeline(
    config: BookSyncConfig,
    bookshelf_id: str,
    *,
    session: requests.Session | None = None,
    **overrides,
) -> SyncPipeline[BookCandidate]:
    http = session or requests.Session()
    slack = config.slack
    return SyncPipeline(
        store=SyncStateStore(config.state_path, BOOKS_KEYS_FIELD),
        fetch=lambda: fetch_messages(
            slack.channel_id, slack.limit, token=slack.token, timeout=config.timeout, session=http
        ),
        extract=extract_books,
        enrich=lambda c: enrich_candidate(c, timeout=config.timeout, session=http),
        publish=lambda c: publish_book(
            c,
            token=config.microblog_token,
            bookshelf_id=bookshelf_id,
            timeout=config.timeout,
            session=http,
        ),
        describe=describe_book,
        delay_seconds=config.delay_seconds,
        **overrides,
    )
