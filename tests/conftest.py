"""Shared fixtures: a fake requests session and a client wired to it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from offline_scrobbler.credentials import Credentials
from offline_scrobbler.lastfm import LastfmClient

API_ROOT = "https://ws.audioscrobbler.com/2.0"


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = ""

    def json(self) -> Any:
        return json.loads(self.text)


@dataclass
class FakeSession:
    """Stands in for requests.Session, replaying canned responses in order."""

    responses: list[FakeResponse | Exception] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    def queue(self, text: str = "", status: int = 200) -> FakeSession:
        self.responses.append(FakeResponse(status, text))
        return self

    def queue_json(self, data: Any, status: int = 200) -> FakeSession:
        return self.queue(json.dumps(data), status)

    def post(self, url: str, data: Any = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def scrobble_xml(accepted: int, ignored: int, code: str = "0", message: str = "") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<lfm status="ok">'
        f'<scrobbles accepted="{accepted}" ignored="{ignored}">'
        "<scrobble>"
        '<track corrected="0">Track</track>'
        '<artist corrected="0">Artist</artist>'
        "<timestamp>1700000000</timestamp>"
        f'<ignoredMessage code="{code}">{message}</ignoredMessage>'
        "</scrobble>"
        "</scrobbles>"
        "</lfm>"
    )


def album_json(tracks: list[dict[str, Any]], name: str = "Album") -> dict[str, Any]:
    return {
        "album": {
            "name": name,
            "artist": "Artist",
            "url": "https://www.last.fm/music/Artist/Album",
            "tracks": {"track": tracks},
        }
    }


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key="key", api_secret="secret", session_key="sk")


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(credentials: Credentials, session: FakeSession) -> LastfmClient:
    return LastfmClient(credentials, session=session, api_root=API_ROOT)
