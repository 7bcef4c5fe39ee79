from __future__ import annotations

import json
import logging
import math
import socket
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from ..errors import ConfigError, EmptyAlbumError, MalformedResponseError, TransportError
from .models import Accepted, Album, Ignored, ScrobbleOutcome, Track
from .signing import signed

if TYPE_CHECKING:
    from ..credentials import Credentials

log = logging.getLogger(__name__)

_orig_getaddrinfo = socket.getaddrinfo
_ipv4_enabled = False


def _getaddrinfo_ipv4_only(host, port, family=0, type=0, proto=0, flags=0):
    return _orig_getaddrinfo(host, port, socket.AF_INET, type, proto, flags)


def enable_ipv4_only() -> None:
    """Enable IPv4-only mode (helps with flaky Last.fm IPv6)."""
    global _ipv4_enabled
    if not _ipv4_enabled:
        socket.getaddrinfo = _getaddrinfo_ipv4_only
        _ipv4_enabled = True


def disable_ipv4_only() -> None:
    """Restore dual-stack (IPv4 + IPv6) socket behavior."""
    global _ipv4_enabled
    if _ipv4_enabled:
        socket.getaddrinfo = _orig_getaddrinfo
        _ipv4_enabled = False


LASTFM_API_ROOT = "https://ws.audioscrobbler.com/2.0"
USER_AGENT = "offline-scrobbler/0.2 (+https://github.com/theirix/offline-scrobbler)"

DEFAULT_TRACK_DURATION = 300


def _describe_error(body: str) -> tuple[int | None, str | None]:
    """Extract the error code and message from a Last.fm error document."""
    try:
        data = json.loads(body)
    except ValueError:
        data = None
    if isinstance(data, dict) and "error" in data:
        try:
            code = int(data["error"])
        except (TypeError, ValueError):
            code = None
        return code, data.get("message")

    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None, None
    err = root.find("error")
    if err is None:
        return None, None
    try:
        code = int(err.get("code", ""))
    except ValueError:
        code = None
    return code, (err.text or "").strip() or None


def _child(root: ET.Element, tag: str) -> ET.Element | None:
    """Find ``tag`` directly under the document root, or the root itself."""
    if root.tag == tag:
        return root
    return root.find(tag)


def _parse_xml(body: str) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise MalformedResponseError(f"xml document ({e})", body) from e


def _parse_duration(value: Any) -> int | None:
    """Track duration in seconds, or None when missing or not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, float) or not math.isfinite(value) or value < 0:
        return None
    return int(value)


def _parse_tracks(tracks: list[dict[str, Any]], body: str) -> list[Track]:
    """Parse Last.fm album track objects into Track instances."""
    parsed: list[Track] = []

    for t in tracks:
        if not isinstance(t, dict):
            raise MalformedResponseError("album.tracks.track[] entry", body)
        name = t.get("name")
        if not isinstance(name, str):
            raise MalformedResponseError("album.tracks.track[].name", body)

        duration = _parse_duration(t.get("duration"))
        if duration is None:
            duration = DEFAULT_TRACK_DURATION
            log.debug("No usable duration for '%s', assuming %ds", name, DEFAULT_TRACK_DURATION)

        parsed.append(Track(title=name, duration=duration))

    return parsed


class LastfmClient:
    """Client for the Last.fm web service.

    Holds the credentials and a single ``requests.Session`` reused for every
    call. Each public method performs exactly one HTTP exchange without
    retrying.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: requests.Session | None = None,
        api_root: str = LASTFM_API_ROOT,
        timeout: float | None = None,
    ):
        self.credentials = credentials
        self.api_root = api_root.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    def _post(self, url: str, data: dict[str, str] | str) -> str:
        """POST and return the body, raising TransportError on failure."""
        try:
            resp = self.session.post(url, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"request failed: {e}") from e

        body = resp.text
        if not 200 <= resp.status_code < 300:
            log.error("Response: %s", body)
            code, message = _describe_error(body)
            detail = f"Last.fm error {code}: {message}" if message else "unsuccessful request"
            raise TransportError(
                f"HTTP {resp.status_code}, {detail}",
                status=resp.status_code,
                body=body,
                error_code=code,
            )

        log.debug("Response: %s", body)
        return body

    def _post_json(self, url: str) -> tuple[dict[str, Any], str]:
        body = self._post(url, "")
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedResponseError("json document", body) from e
        if not isinstance(data, dict):
            raise MalformedResponseError("json object", body)
        if "error" in data:
            code, message = _describe_error(body)
            raise TransportError(f"Last.fm error {code}: {message}", body=body, error_code=code)
        return data, body

    def request_token(self) -> str:
        """Obtain an unauthorized request token (auth.gettoken)."""
        url = f"{self.api_root}/?method=auth.gettoken&api_key={self.credentials.api_key}&format=json"
        data, body = self._post_json(url)

        token = data.get("token")
        if not isinstance(token, str):
            raise MalformedResponseError("token", body)
        log.debug("Found token %s", token)
        return token

    def get_session_key(self, token: str) -> str:
        """Exchange an authorized request token for a session key (auth.getSession)."""
        params = signed(
            {
                "api_key": self.credentials.api_key,
                "method": "auth.getSession",
                "token": token,
            },
            self.credentials.api_secret,
        )
        body = self._post(self.api_root, params)

        root = _parse_xml(body)
        session = _child(root, "session")
        if session is None:
            raise MalformedResponseError("xml tag session", body)
        key = session.find("key")
        if key is None:
            raise MalformedResponseError("xml tag key", body)
        if not key.text:
            raise MalformedResponseError("xml text of key", body)
        return key.text.strip()

    def lookup_album(self, artist: str, album: str) -> Album:
        """Fetch an album with its track list (album.getInfo)."""
        url = (
            f"{self.api_root}/?method=album.getInfo"
            f"&artist={quote(artist, safe='')}"
            f"&album={quote(album, safe='')}"
            f"&api_key={self.credentials.api_key}&format=json"
        )
        data, body = self._post_json(url)

        info = data.get("album")
        if not isinstance(info, dict):
            raise MalformedResponseError("album", body)
        title = info.get("name")
        if not isinstance(title, str):
            raise MalformedResponseError("album.name", body)

        if "tracks" not in info:
            raise EmptyAlbumError(artist, album)
        tracks_obj = info["tracks"]
        if not isinstance(tracks_obj, dict):
            raise MalformedResponseError("album.tracks", body)
        tracks = tracks_obj.get("track")
        if isinstance(tracks, dict):
            tracks = [tracks]
        if not isinstance(tracks, list):
            raise MalformedResponseError("album.tracks.track", body)
        if not tracks:
            raise EmptyAlbumError(artist, album)

        url_value = info.get("url")
        return Album(
            title=title,
            tracks=tuple(_parse_tracks(tracks, body)),
            url=url_value if isinstance(url_value, str) and url_value else None,
        )

    def scrobble(self, artist: str, track: str, when: datetime) -> ScrobbleOutcome:
        """Submit a single scrobble (track.scrobble) played at the timezone-aware ``when``."""
        if when.tzinfo is None:
            raise ValueError("scrobble time must be timezone-aware")
        if not self.credentials.session_key:
            raise ConfigError("no session key, run the auth command first")

        params = signed(
            {
                "api_key": self.credentials.api_key,
                "method": "track.scrobble",
                "artist": artist,
                "track": track,
                "timestamp": str(int(when.timestamp())),
                "sk": self.credentials.session_key,
            },
            self.credentials.api_secret,
        )
        body = self._post(self.api_root, params)
        return self._parse_scrobble_response(body)

    def _parse_scrobble_response(self, body: str) -> ScrobbleOutcome:
        root = _parse_xml(body)
        scrobbles = _child(root, "scrobbles")
        if scrobbles is None:
            raise MalformedResponseError("xml tag scrobbles", body)

        counts = {}
        for attr in ("accepted", "ignored"):
            raw = scrobbles.get(attr)
            if raw is None:
                raise MalformedResponseError(f"{attr} attribute", body)
            try:
                counts[attr] = int(raw)
            except ValueError as e:
                raise MalformedResponseError(f"integer {attr} attribute", body) from e

        if counts["accepted"] == 1 and counts["ignored"] == 0:
            return Accepted()

        if counts["accepted"] == 0 and counts["ignored"] == 1:
            scrobble = scrobbles.find("scrobble")
            if scrobble is None:
                raise MalformedResponseError("xml tag scrobble", body)
            message = scrobble.find("ignoredMessage")
            if message is None:
                raise MalformedResponseError("xml tag ignoredMessage", body)
            code = message.get("code")
            if code is None:
                raise MalformedResponseError("ignoredMessage code attribute", body)
            return Ignored(code=code, message=message.text or "")

        raise MalformedResponseError(
            f"scrobbles accepted={counts['accepted']} ignored={counts['ignored']}",
            body,
        )
