"""Minimal stand-ins for requests sessions and responses."""
import json

import requests


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")
        self.headers = headers or {}

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Replays queued responses (or exceptions) and records every call."""

    def __init__(self, get=None, post=None):
        self.get_queue = list(get or [])
        self.post_queue = list(post or [])
        self.calls = []

    def _next(self, queue, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        if not queue:
            raise AssertionError(f"unexpected {method} {url}")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next(self.get_queue, "GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next(self.post_queue, "POST", url, kwargs)
