#!/usr/bin/env python3
"""Fetch the Goodreads "currently-reading" shelf into data/reading.json."""
from __future__ import annotations

import argparse
import re
import sys
from typing import Iterable
import xml.etree.ElementTree as ET

import requests

import config as cfg
from utils.snapshot import write_snapshot

OUTPUT_NAME = "reading.json"
IMAGE_TAGS = ("book_large_image_url", "book_medium_image_url", "book_image_url")
IMG_SRC_PATTERN = re.compile(r'src="([^"]+)"')
BY_SUFFIX_PATTERN = re.compile(r" by .*$")


def _log(message: str) -> None:
    print(message)


def _get(item: ET.Element, tag: str) -> str | None:
    el = item.find(tag)
    if el is None:
        return None
    text = (el.text or "").strip()
    return text or None


def book_image(item: ET.Element) -> str | None:
    for tag in IMAGE_TAGS:
        image = _get(item, tag)
        if image:
            return image
    description = _get(item, "description") or ""
    match = IMG_SRC_PATTERN.search(description)
    return match.group(1) if match else None


def parse_reading_rss(xml_text: str | bytes) -> list[dict]:
    """Books from a Goodreads shelf RSS; items without title or author are skipped."""
    root = ET.fromstring(xml_text)
    books: list[dict] = []
    for item in root.iter("item"):
        raw_title = _get(item, "title")
        title = BY_SUFFIX_PATTERN.sub("", raw_title).strip() if raw_title else None
        author = _get(item, "author_name")
        if not title or not author:
            continue
        books.append(
            {
                "title": title,
                "author": author,
                "image": book_image(item),
                "link": _get(item, "link"),
            }
        )
    return books


def fetch_rss(url: str, *, timeout: float) -> bytes:
    res = requests.get(url, timeout=timeout)
    res.raise_for_status()
    return res.content


def main(argv: Iterable[str], env=None) -> int:
    parser = argparse.ArgumentParser(description="Write the Goodreads currently-reading shelf to data/reading.json.")
    parser.add_argument("--rss-url", default=None, help="Shelf RSS URL (default: GOODREADS_RSS_URL).")
    args = parser.parse_args(list(argv))

    rss_url = args.rss_url or cfg.get_env(cfg.GOODREADS_RSS_URL_ENV, env) or cfg.DEFAULT_GOODREADS_RSS_URL

    _log("📖 Fetching Goodreads RSS feed...")
    try:
        books = parse_reading_rss(fetch_rss(rss_url, timeout=cfg.get_http_timeout(env)))
    except (cfg.ConfigError, requests.RequestException, ET.ParseError) as exc:
        _log(f"❌ Error fetching Goodreads: {exc}")
        return 1

    write_snapshot(cfg.get_data_dir(env) / OUTPUT_NAME, "books", books)
    _log(f"✅ Saved {len(books)} books to {OUTPUT_NAME}")
    _log("\n".join(f"  - {b['title']} by {b['author']}" for b in books))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
