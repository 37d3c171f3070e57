"""Best-effort metadata lookups for candidates before they are published."""

from __future__ import annotations

import re
from typing import Any

import requests
from bs4 import BeautifulSoup

from utils.extract import BookCandidate, BookmarkCandidate, Candidate

OPEN_LIBRARY_SEARCH_URL = "https://openlibrary.org/search.json"
PAGE_TITLE_TIMEOUT = 5
PAGE_USER_AGENT = "Mozilla/5.0 (compatible; BookmarkBot/1.0)"
LOOKUP_USER_AGENT = "SiteDataSync/1.0"


class EnrichmentError(RuntimeError):
    """A metadata lookup failed; the candidate is used as-is."""


def _log(message: str) -> None:
    print(message)


def _http(session: requests.Session | None) -> requests.Session:
    return session or requests.Session()


def extract_html_title(html_text: str) -> str | None:
    soup = BeautifulSoup(html_text or "", "html.parser")
    if soup.title is None:
        return None
    title = re.sub(r"\s+", " ", soup.title.get_text()).strip()
    return title or None


def fetch_page_title(
    url: str,
    *,
    timeout: float = PAGE_TITLE_TIMEOUT,
    session: requests.Session | None = None,
) -> str | None:
    try:
        res = _http(session).get(url, headers={"User-Agent": PAGE_USER_AGENT}, timeout=timeout)
        res.raise_for_status()
    except requests.RequestException as exc:
        raise EnrichmentError(f"Could not fetch {url}: {exc}") from exc
    return extract_html_title(res.text)


def resolve_bookmark_title(
    candidate: BookmarkCandidate,
    *,
    timeout: float = PAGE_TITLE_TIMEOUT,
    session: requests.Session | None = None,
) -> BookmarkCandidate:
    """Fill in a missing title from the page itself, falling back to the URL."""
    if not candidate.needs_title:
        return candidate

    _log(f"🔎 Fetching title for: {candidate.url}")
    try:
        title = fetch_page_title(candidate.url, timeout=timeout, session=session)
    except EnrichmentError as exc:
        _log(f"⚠️  {exc}")
        title = None
    return candidate.with_title(title or candidate.url)


def search_isbn(
    title: str,
    author: str | None,
    *,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> str | None:
    query = f"{title} {author or ''}".strip()
    try:
        res = _http(session).get(
            OPEN_LIBRARY_SEARCH_URL,
            params={"q": query, "limit": 1},
            headers={"User-Agent": LOOKUP_USER_AGENT},
            timeout=timeout,
        )
        res.raise_for_status()
        data: Any = res.json()
    except (requests.RequestException, ValueError) as exc:
        raise EnrichmentError(f"Open Library lookup failed for {title}: {exc}") from exc

    docs = data.get("docs") if isinstance(data, dict) else None
    if not docs or not isinstance(docs[0], dict):
        return None
    isbns = docs[0].get("isbn") or []
    if isinstance(isbns, list) and isbns:
        return str(isbns[0])
    return None


def enrich_book(
    candidate: BookCandidate,
    *,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> BookCandidate:
    if candidate.isbn:
        return candidate

    _log(f"🔎 Looking up ISBN for: {candidate.title} by {candidate.author or 'Unknown'}")
    try:
        isbn = search_isbn(candidate.title, candidate.author, timeout=timeout, session=session)
    except EnrichmentError as exc:
        _log(f"⚠️  {exc}")
        isbn = None
    return candidate.with_isbn(isbn)


def enrich_candidate(
    candidate: Candidate,
    *,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> Candidate:
    if isinstance(candidate, BookmarkCandidate):
        return resolve_bookmark_title(candidate, timeout=min(timeout, PAGE_TITLE_TIMEOUT), session=session)
    return enrich_book(candidate, timeout=timeout, session=session)
