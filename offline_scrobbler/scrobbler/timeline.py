from dataclasses import dataclass
from datetime import datetime, timedelta

from ..lastfm import Album, Track

TRACK_GAP = timedelta(seconds=5)


@dataclass(frozen=True, slots=True)
class PlannedScrobble:
    """A track paired with the time it is reported as played."""

    track: Track
    timestamp: datetime


def plan_timeline(
    album: Album,
    reference_time: datetime,
    offset: timedelta = timedelta(0),
    gap: timedelta = TRACK_GAP,
) -> list[PlannedScrobble]:
    """Lay the album tracks out back to back so that the last one ends at
    ``reference_time - offset``.

    Each timestamp marks the instant its track finished playing, with ``gap``
    between the end of one track and the start of the next. ``reference_time``
    must be timezone-aware.
    """
    if reference_time.tzinfo is None:
        raise ValueError("reference time must be timezone-aware")
    tracks = album.tracks
    if not tracks:
        return []

    total = timedelta(seconds=album.total_duration)
    cursor = reference_time - total - (len(tracks) - 1) * gap - offset

    plan: list[PlannedScrobble] = []
    for index, track in enumerate(tracks):
        if index:
            cursor += gap
        cursor += timedelta(seconds=track.duration)
        plan.append(PlannedScrobble(track=track, timestamp=cursor))

    return plan
