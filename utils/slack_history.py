"""Read channel history from the Slack Web API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests

SLACK_HISTORY_URL = "https://slack.com/api/conversations.history"


class UpstreamFetchError(RuntimeError):
    """Slack could not be reached or returned something unusable."""


@dataclass(frozen=True)
class RawMessage:
    text: str
    ts: str | float | None = None
    is_bot: bool = False
    has_thread: bool = False
    subtype: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RawMessage":
        return cls(
            text=str(payload.get("text") or ""),
            ts=payload.get("ts"),
            is_bot=bool(payload.get("bot_id")),
            has_thread=bool(payload.get("thread_ts")),
            subtype=payload.get("subtype") or None,
        )

    @property
    def posted_at(self) -> datetime | None:
        try:
            seconds = float(self.ts)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc)


def fetch_messages(
    channel_id: str,
    limit: int,
    *,
    token: str,
    timeout: float = 20,
    session: requests.Session | None = None,
) -> list[RawMessage]:
    """Return the channel messages in the order Slack sends them (newest first)."""
    http = session or requests.Session()
    try:
        res = http.get(
            SLACK_HISTORY_URL,
            params={"channel": channel_id, "limit": limit},
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise UpstreamFetchError(f"Slack request failed: {exc}") from exc

    if res.status_code >= 400:
        raise UpstreamFetchError(f"Slack HTTP error {res.status_code}")

    try:
        data = res.json()
    except ValueError as exc:
        raise UpstreamFetchError("Slack returned a non-JSON body") from exc

    if not isinstance(data, dict):
        raise UpstreamFetchError("Slack returned an unexpected payload")
    if not data.get("ok"):
        raise UpstreamFetchError(f"Slack API error: {data.get('error') or 'unknown'}")

    messages = data.get("messages") or []
    if not isinstance(messages, list):
        raise UpstreamFetchError("Slack payload has no message list")

    return [RawMessage.from_payload(item) for item in messages if isinstance(item, dict)]
