import pytest

from utils.extract import (
    BookCandidate,
    BookmarkCandidate,
    extract_bookmarks,
    extract_books,
    is_skippable_message,
    parse_book_from_text,
    parse_bookmark_links,
    strip_reading_prefixes,
)
from utils.slack_history import RawMessage


def msg(text, **kwargs):
    return RawMessage(text=text, **kwargs)


# -------- bookmarks --------

def test_bookmark_with_label_uses_label_as_title():
    links = parse_bookmark_links("Check this out <https://example.com/a|Cool Article>")
    assert links == [BookmarkCandidate(url="https://example.com/a", title="Cool Article")]


def test_bookmark_without_label_needs_title():
    (link,) = parse_bookmark_links("<https://example.com/b>")
    assert link.title is None
    assert link.needs_title is True


def test_bookmark_label_equal_to_url_is_ignored():
    (link,) = parse_bookmark_links("<https://example.com/c|https://example.com/c>")
    assert link.title is None


@pytest.mark.parametrize(
    "url",
    [
        "https://slack.com/help",
        "https://myteam.slack.com/archives/C123/p456",
    ],
)
def test_links_to_slack_are_skipped(url):
    assert extract_bookmarks([msg(f"see <{url}>")]) == []


def test_lookalike_domain_is_not_skipped():
    (link,) = extract_bookmarks([msg("<https://notslack.com/x>")])
    assert link.url == "https://notslack.com/x"


def test_multiple_links_in_one_message_keep_order():
    links = extract_bookmarks([msg("<https://a.example/1> and <https://b.example/2|B>")])
    assert [link.url for link in links] == ["https://a.example/1", "https://b.example/2"]


def test_bookmarks_dedupe_keeps_first_occurrence():
    messages = [
        msg("<https://example.com/a|First>", ts="1700000200.0"),
        msg("<https://example.com/a|Second>", ts="1700000100.0"),
        msg("<https://example.com/b>", ts="1700000000.0"),
    ]
    links = extract_bookmarks(messages)
    assert [link.url for link in links] == ["https://example.com/a", "https://example.com/b"]
    assert links[0].title == "First"
    assert links[0].posted_at is not None


def test_bookmarks_skip_bot_thread_and_system_messages():
    messages = [
        msg("<https://example.com/bot>", is_bot=True),
        msg("<https://example.com/thread>", has_thread=True),
        msg("<https://example.com/join>", subtype="channel_join"),
        msg("<https://example.com/ok>"),
    ]
    assert [link.url for link in extract_bookmarks(messages)] == ["https://example.com/ok"]


def test_is_skippable_message():
    assert is_skippable_message(msg("x", subtype="message_changed")) is True
    assert is_skippable_message(msg("x")) is False


# -------- books --------

def test_currently_reading_with_emoji():
    book = parse_book_from_text("📚 Currently reading: Breakneck by Dan Wang")
    assert book == BookCandidate(title="Breakneck", author="Dan Wang")


@pytest.mark.parametrize(
    "text",
    [
        "currently reading: Dune by Frank Herbert",
        "Now reading: Dune by Frank Herbert",
        "READING: Dune by Frank Herbert",
        "Dune BY Frank Herbert",
    ],
)
def test_prefixes_and_separator_are_case_insensitive(text):
    assert parse_book_from_text(text) == BookCandidate(title="Dune", author="Frank Herbert")


def test_split_happens_at_first_by():
    book = parse_book_from_text("Stand by Me by Stephen King")
    assert book.title == "Stand"
    assert book.author == "Me by Stephen King"


def test_title_only_book():
    book = parse_book_from_text("📚 The Power Broker")
    assert book == BookCandidate(title="The Power Broker", author=None)
    assert book.key == "the power broker|"


def test_title_only_rejects_empty_and_long_text():
    assert parse_book_from_text("📚 ") is None
    assert parse_book_from_text("x" * 200) is None
    assert parse_book_from_text("x" * 199) is not None


def test_strip_reading_prefixes_only_strips_leading_text():
    assert strip_reading_prefixes("Notes on reading: habits") == "Notes on reading: habits"


def test_books_skip_messages_with_urls():
    messages = [msg("Dune by Frank Herbert <https://example.com/dune>")]
    assert extract_books(messages) == []


def test_books_dedupe_is_case_insensitive():
    messages = [
        msg("Dune by Frank Herbert"),
        msg("dune by FRANK HERBERT"),
        msg("Emma by Jane Austen", is_bot=True),
    ]
    books = extract_books(messages)
    assert books == [BookCandidate(title="Dune", author="Frank Herbert")]
    assert books[0].key == "dune|frank herbert"
