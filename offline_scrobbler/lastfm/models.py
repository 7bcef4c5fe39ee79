from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Track:
    """A track of an album as listed by Last.fm."""

    title: str
    duration: int


@dataclass(frozen=True, slots=True)
class Album:
    """An album with its tracks in canonical order."""

    title: str
    tracks: tuple[Track, ...]
    url: str | None = None

    @property
    def total_duration(self) -> int:
        return sum(t.duration for t in self.tracks)


@dataclass(frozen=True, slots=True)
class Accepted:
    """The scrobble was recorded."""


@dataclass(frozen=True, slots=True)
class Ignored:
    """The request succeeded but the service declined to record the scrobble."""

    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


ScrobbleOutcome = Accepted | Ignored
