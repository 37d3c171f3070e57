from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import os
from typing import Mapping

SLACK_BOT_TOKEN_ENV = "SLACK_BOT_TOKEN"
SLACK_CHANNEL_ID_ENV = "SLACK_CHANNEL_ID"
SLACK_READING_CHANNEL_ID_ENV = "SLACK_READING_CHANNEL_ID"
MICROBLOG_TOKEN_ENV = "MICROBLOG_TOKEN"
MICROBLOG_BOOKSHELF_ID_ENV = "MICROBLOG_BOOKSHELF_ID"
SITE_DATA_DIR_ENV = "SITE_DATA_DIR"
SYNC_HTTP_TIMEOUT_ENV = "SYNC_HTTP_TIMEOUT"
LASTFM_API_KEY_ENV = "LASTFM_API_KEY"
LASTFM_USER_ENV = "LASTFM_USER"
MICROBLOG_FEED_URL_ENV = "MICROBLOG_FEED_URL"
GOODREADS_RSS_URL_ENV = "GOODREADS_RSS_URL"

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_HTTP_TIMEOUT = 20
DEFAULT_LASTFM_USER = "sophiealu"
DEFAULT_MICROBLOG_FEED_URL = "https://sophiealula.micro.blog/feed.json"
DEFAULT_GOODREADS_RSS_URL = (
    "https://www.goodreads.com/review/list_rss/184356502-sophie-davis?shelf=currently-reading"
)

BOOKMARKS_STATE_NAME = "microblog-bookmarks-state.json"
BOOKS_STATE_NAME = "microblog-books-state.json"

# Slack history page size per pipeline.
BOOKMARKS_HISTORY_LIMIT = 50
BOOKS_HISTORY_LIMIT = 20

# Pause between Micro.blog writes.
BOOKMARKS_DELAY_SECONDS = 0.5
BOOKS_DELAY_SECONDS = 1.0

MICROBLOG_APPS_URL = "https://micro.blog/account/apps"


class ConfigError(RuntimeError):
    """A required setting is missing or invalid."""


def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def _get(env: Mapping[str, str], name: str) -> str | None:
    value = (env.get(name) or "").strip()
    return value or None


def _require(env: Mapping[str, str], name: str) -> str:
    value = _get(env, name)
    if not value:
        raise ConfigError(f"Missing {name}")
    return value


def get_env(name: str, env: Mapping[str, str] | None = None) -> str | None:
    """Stripped value of an environment variable, or None when unset/blank."""
    return _get(_env(env), name)


def get_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """
    Directory where the site data files live.

    Priority:
    - SITE_DATA_DIR if defined
    - data/ next to this repository
    """
    value = _get(_env(env), SITE_DATA_DIR_ENV)
    if value:
        return Path(value).expanduser()
    return DEFAULT_DATA_DIR


def get_http_timeout(env: Mapping[str, str] | None = None) -> float:
    value = _get(_env(env), SYNC_HTTP_TIMEOUT_ENV)
    if not value:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"{SYNC_HTTP_TIMEOUT_ENV} must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"{SYNC_HTTP_TIMEOUT_ENV} must be positive, got {value!r}")
    return timeout


@dataclass(frozen=True)
class SlackSource:
    token: str
    channel_id: str
    limit: int


@dataclass(frozen=True)
class BookmarkSyncConfig:
    slack: SlackSource
    microblog_token: str
    state_path: Path
    timeout: float = DEFAULT_HTTP_TIMEOUT
    delay_seconds: float = BOOKMARKS_DELAY_SECONDS


@dataclass(frozen=True)
class BookSyncConfig:
    slack: SlackSource
    microblog_token: str
    state_path: Path
    bookshelf_id: str | None = None
    timeout: float = DEFAULT_HTTP_TIMEOUT
    delay_seconds: float = BOOKS_DELAY_SECONDS


def load_slack_source(
    env: Mapping[str, str] | None = None,
    *,
    channel_envs: tuple[str, ...] = (SLACK_CHANNEL_ID_ENV,),
    limit: int = BOOKMARKS_HISTORY_LIMIT,
) -> SlackSource:
    env = _env(env)
    token = _get(env, SLACK_BOT_TOKEN_ENV)
    channel_id = next((_get(env, name) for name in channel_envs if _get(env, name)), None)
    if not token or not channel_id:
        raise ConfigError(f"Missing {SLACK_BOT_TOKEN_ENV} or {channel_envs[0]}")
    return SlackSource(token=token, channel_id=channel_id, limit=limit)


def load_bookmark_sync_config(env: Mapping[str, str] | None = None) -> BookmarkSyncConfig:
    env = _env(env)
    slack = load_slack_source(env, limit=BOOKMARKS_HISTORY_LIMIT)
    return BookmarkSyncConfig(
        slack=slack,
        microblog_token=_require(env, MICROBLOG_TOKEN_ENV),
        state_path=get_data_dir(env) / BOOKMARKS_STATE_NAME,
        timeout=get_http_timeout(env),
    )


def load_book_sync_config(env: Mapping[str, str] | None = None) -> BookSyncConfig:
    env = _env(env)
    slack = load_slack_source(
        env,
        channel_envs=(SLACK_READING_CHANNEL_ID_ENV, SLACK_CHANNEL_ID_ENV),
        limit=BOOKS_HISTORY_LIMIT,
    )
    return BookSyncConfig(
        slack=slack,
        microblog_token=_require(env, MICROBLOG_TOKEN_ENV),
        state_path=get_data_dir(env) / BOOKS_STATE_NAME,
        bookshelf_id=_get(env, MICROBLOG_BOOKSHELF_ID_ENV),
        timeout=get_http_timeout(env),
    )


def with_run_overrides(config, *, limit=None, delay=None, timeout=None):
    """Return ``config`` with CLI overrides applied; bad values raise ConfigError."""
    if limit is not None:
        if limit <= 0:
            raise ConfigError(f"--limit must be positive, got {limit}")
        config = replace(config, slack=replace(config.slack, limit=limit))
    if delay is not None:
        if delay < 0:
            raise ConfigError(f"--delay must not be negative, got {delay}")
        config = replace(config, delay_seconds=delay)
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError(f"--timeout must be positive, got {timeout}")
        config = replace(config, timeout=timeout)
    return config
