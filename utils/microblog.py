"""Micro.blog endpoints used by the sync pipelines (Micropub and Books)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from utils.extract import BookCandidate, BookmarkCandidate

MICROPUB_URL = "https://micro.blog/micropub"
BOOKS_URL = "https://micro.blog/books"
BOOKSHELVES_URL = "https://micro.blog/books/bookshelves"
CURRENTLY_READING = "currently reading"
ERROR_BODY_LIMIT = 500


class PublishError(RuntimeError):
    """Micro.blog rejected a write."""


@dataclass(frozen=True)
class PublishResult:
    key: str
    success: bool
    error: str | None = None
    location: str | None = None


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _post_form(
    url: str,
    data: dict[str, str],
    *,
    token: str,
    timeout: float,
    session: requests.Session | None,
) -> requests.Response:
    http = session or requests.Session()
    try:
        # requests form-encodes dict bodies (application/x-www-form-urlencoded).
        res = http.post(url, data=data, headers=_auth_headers(token), timeout=timeout)
    except requests.RequestException as exc:
        raise PublishError(str(exc)) from exc
    if not 200 <= res.status_code < 300:
        body = (res.text or "")[:ERROR_BODY_LIMIT]
        raise PublishError(f"{res.status_code}: {body}")
    return res


def bookmark_form(candidate: BookmarkCandidate) -> dict[str, str]:
    data = {"h": "entry", "bookmark-of": candidate.url}
    if candidate.title and candidate.title != candidate.url:
        data["name"] = candidate.title
    return data


def book_form(candidate: BookCandidate, bookshelf_id: str) -> dict[str, str]:
    data = {
        "title": candidate.title,
        "author": candidate.author or "Unknown",
        "bookshelf_id": str(bookshelf_id),
    }
    if candidate.isbn:
        data["isbn"] = candidate.isbn
    return data


def publish_bookmark(
    candidate: BookmarkCandidate,
    *,
    token: str,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> PublishResult:
    try:
        res = _post_form(MICROPUB_URL, bookmark_form(candidate), token=token, timeout=timeout, session=session)
    except PublishError as exc:
        return PublishResult(key=candidate.key, success=False, error=f"Micropub error {exc}")
    return PublishResult(key=candidate.key, success=True, location=res.headers.get("Location"))


def publish_book(
    candidate: BookCandidate,
    *,
    token: str,
    bookshelf_id: str,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> PublishResult:
    try:
        res = _post_form(BOOKS_URL, book_form(candidate, bookshelf_id), token=token, timeout=timeout, session=session)
    except PublishError as exc:
        return PublishResult(key=candidate.key, success=False, error=f"Books API error {exc}")
    return PublishResult(key=candidate.key, success=True, location=res.headers.get("Location"))


def fetch_bookshelves(
    *,
    token: str,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> list[dict[str, Any]]:
    http = session or requests.Session()
    res = http.get(BOOKSHELVES_URL, headers=_auth_headers(token), timeout=timeout)
    res.raise_for_status()
    data = res.json()
    items = data.get("items") if isinstance(data, dict) else None
    return [item for item in items or [] if isinstance(item, dict)]


def shelf_id(shelf: dict[str, Any]) -> str | None:
    meta = shelf.get("_microblog") or {}
    value = meta.get("id") if isinstance(meta, dict) else None
    return str(value) if value is not None else None


def find_currently_reading_shelf(shelves: list[dict[str, Any]]) -> str | None:
    for shelf in shelves:
        title = str(shelf.get("title") or "")
        if CURRENTLY_READING in title.lower():
            return shelf_id(shelf)
    return None
