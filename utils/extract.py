"""Turn Slack messages into bookmark and book candidates.

Slack encodes links as ``<url>`` or ``<url|label>``. Book messages are plain
shorthand such as ``📚 Currently reading: Breakneck by Dan Wang``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
import re
from typing import Iterable, Sequence, TypeVar, Union
from urllib.parse import urlparse

from utils.slack_history import RawMessage

SLACK_LINK_PATTERN = re.compile(r"<(https?://[^>|]+)(?:\|([^>]+))?>")
SLACK_DOMAIN = "slack.com"

READING_PREFIX_PATTERNS = (
    re.compile(r"^📚\s*", re.IGNORECASE),
    re.compile(r"^currently reading:\s*", re.IGNORECASE),
    re.compile(r"^reading:\s*", re.IGNORECASE),
    re.compile(r"^now reading:\s*", re.IGNORECASE),
)
TITLE_BY_AUTHOR_PATTERN = re.compile(r"^(.+?)\s+by\s+(.+)$", re.IGNORECASE)
MAX_TITLE_ONLY_LENGTH = 200


@dataclass(frozen=True)
class BookmarkCandidate:
    url: str
    title: str | None = None
    posted_at: datetime | None = None

    @property
    def key(self) -> str:
        return self.url

    @property
    def needs_title(self) -> bool:
        return not self.title or self.title == self.url

    def with_title(self, title: str) -> "BookmarkCandidate":
        return replace(self, title=title)


@dataclass(frozen=True)
class BookCandidate:
    title: str
    author: str | None = None
    isbn: str | None = None

    @property
    def key(self) -> str:
        return book_key(self.title, self.author)

    def with_isbn(self, isbn: str | None) -> "BookCandidate":
        return replace(self, isbn=isbn)


Candidate = Union[BookmarkCandidate, BookCandidate]
C = TypeVar("C", BookmarkCandidate, BookCandidate)


def book_key(title: str, author: str | None) -> str:
    return f"{title.lower()}|{(author or '').lower()}"


def is_skippable_message(message: RawMessage) -> bool:
    """Thread replies, bot posts and system notices never carry candidates."""
    if message.has_thread or message.is_bot:
        return True
    return bool(message.subtype)


def is_slack_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return host == SLACK_DOMAIN or host.endswith("." + SLACK_DOMAIN)


def iter_slack_links(text: str) -> Iterable[tuple[str, str | None]]:
    for match in SLACK_LINK_PATTERN.finditer(text or ""):
        label = match.group(2)
        yield match.group(1), (label.strip() if label else None)


def parse_bookmark_links(text: str, *, posted_at: datetime | None = None) -> list[BookmarkCandidate]:
    candidates: list[BookmarkCandidate] = []
    for url, label in iter_slack_links(text):
        if is_slack_url(url):
            continue
        title = label if label and label != url else None
        candidates.append(BookmarkCandidate(url=url, title=title, posted_at=posted_at))
    return candidates


def has_embedded_url(text: str) -> bool:
    return "http://" in text or "https://" in text


def strip_reading_prefixes(text: str) -> str:
    cleaned = text or ""
    for pattern in READING_PREFIX_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()


def parse_book_from_text(text: str) -> BookCandidate | None:
    cleaned = strip_reading_prefixes(text)

    match = TITLE_BY_AUTHOR_PATTERN.match(cleaned)
    if match:
        return BookCandidate(title=match.group(1).strip(), author=match.group(2).strip())

    if 0 < len(cleaned) < MAX_TITLE_ONLY_LENGTH:
        return BookCandidate(title=cleaned)
    return None


def dedupe_by_key(candidates: Iterable[C]) -> list[C]:
    seen: set[str] = set()
    result: list[C] = []
    for candidate in candidates:
        if candidate.key in seen:
            continue
        seen.add(candidate.key)
        result.append(candidate)
    return result


def extract_bookmarks(messages: Sequence[RawMessage]) -> list[BookmarkCandidate]:
    found: list[BookmarkCandidate] = []
    for message in messages:
        if is_skippable_message(message):
            continue
        found.extend(parse_bookmark_links(message.text, posted_at=message.posted_at))
    return dedupe_by_key(found)


def extract_books(messages: Sequence[RawMessage]) -> list[BookCandidate]:
    found: list[BookCandidate] = []
    for message in messages:
        if is_skippable_message(message):
            continue
        if has_embedded_url(message.text):
            continue
        book = parse_book_from_text(message.text)
        if book is not None:
            found.append(book)
    return dedupe_by_key(found)
