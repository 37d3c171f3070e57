from pathlib import Path

import pytest

import config as cfg


def test_bookmark_config_reads_env(tmp_path: Path):
    env = {
        "SLACK_BOT_TOKEN": " xoxb-1 ",
        "SLACK_CHANNEL_ID": "C1",
        "MICROBLOG_TOKEN": "mb",
        "SITE_DATA_DIR": str(tmp_path),
        "SYNC_HTTP_TIMEOUT": "7.5",
    }
    config = cfg.load_bookmark_sync_config(env)
    assert config.slack == cfg.SlackSource(token="xoxb-1", channel_id="C1", limit=cfg.BOOKMARKS_HISTORY_LIMIT)
    assert config.state_path == tmp_path / cfg.BOOKMARKS_STATE_NAME
    assert config.timeout == 7.5
    assert config.delay_seconds == cfg.BOOKMARKS_DELAY_SECONDS


def test_book_config_prefers_reading_channel():
    env = {
        "SLACK_BOT_TOKEN": "x",
        "SLACK_CHANNEL_ID": "C1",
        "SLACK_READING_CHANNEL_ID": "C2",
        "MICROBLOG_TOKEN": "mb",
    }
    config = cfg.load_book_sync_config(env)
    assert config.slack.channel_id == "C2"
    assert config.slack.limit == cfg.BOOKS_HISTORY_LIMIT
    assert config.bookshelf_id is None
    assert config.state_path == cfg.DEFAULT_DATA_DIR / cfg.BOOKS_STATE_NAME


def test_book_config_falls_back_to_channel_and_reads_shelf():
    env = {"SLACK_BOT_TOKEN": "x", "SLACK_CHANNEL_ID": "C1", "MICROBLOG_TOKEN": "mb", "MICROBLOG_BOOKSHELF_ID": "5"}
    config = cfg.load_book_sync_config(env)
    assert config.slack.channel_id == "C1"
    assert config.bookshelf_id == "5"


@pytest.mark.parametrize(
    "env",
    [
        {"SLACK_CHANNEL_ID": "C1", "MICROBLOG_TOKEN": "mb"},
        {"SLACK_BOT_TOKEN": "x", "MICROBLOG_TOKEN": "mb"},
        {"SLACK_BOT_TOKEN": "x", "SLACK_CHANNEL_ID": "C1", "MICROBLOG_TOKEN": "  "},
    ],
)
def test_missing_settings_raise_config_error(env):
    with pytest.raises(cfg.ConfigError):
        cfg.load_bookmark_sync_config(env)


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_invalid_timeout(value):
    with pytest.raises(cfg.ConfigError):
        cfg.get_http_timeout({"SYNC_HTTP_TIMEOUT": value})


def test_defaults_use_process_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("SITE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("SYNC_HTTP_TIMEOUT", raising=False)
    assert cfg.get_data_dir() == tmp_path
    assert cfg.get_http_timeout() == cfg.DEFAULT_HTTP_TIMEOUT


def test_run_overrides_accept_zero_delay_and_reject_bad_values(tmp_path: Path):
    config = cfg.BookmarkSyncConfig(
        slack=cfg.SlackSource(token="x", channel_id="C1", limit=50),
        microblog_token="m",
        state_path=tmp_path / "state.json",
    )

    updated = cfg.with_run_overrides(config, limit=5, delay=0, timeout=3)
    assert (updated.slack.limit, updated.delay_seconds, updated.timeout) == (5, 0, 3)
    assert cfg.with_run_overrides(config) == config

    for overrides in ({"delay": -0.5}, {"limit": 0}, {"timeout": 0}):
        with pytest.raises(cfg.ConfigError):
            cfg.with_run_overrides(config, **overrides)
