from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .lastfm.models import Ignored, Track


class ScrobblerError(Exception):
    """Base class for every failure reported by a scrobbler operation."""


class ConfigError(ScrobblerError):
    """Credentials or settings are missing or unusable."""


class LastfmError(ScrobblerError):
    """Base class for failures talking to the Last.fm API."""


class TransportError(LastfmError):
    """The request could not be completed or returned a non-success status."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str = "",
        error_code: int | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body
        self.error_code = error_code


class MalformedResponseError(LastfmError):
    """The response body did not have the expected shape."""

    def __init__(self, missing: str, body: str = ""):
        super().__init__(f"malformed response: {missing}")
        self.missing = missing
        self.body = body


class EmptyAlbumError(LastfmError):
    """The album was found but lists no tracks."""

    def __init__(self, artist: str, album: str):
        super().__init__(f"album '{album}' by '{artist}' has no tracks")
        self.artist = artist
        self.album = album


class IncompleteScrobbleError(ScrobblerError):
    """Some tracks of a batch were ignored by the service."""

    def __init__(self, ignored: list[tuple[Track, Ignored]], total: int):
        super().__init__(f"not all tracks scrobbled ({len(ignored)} of {total} ignored)")
        self.ignored = ignored
        self.total = total
