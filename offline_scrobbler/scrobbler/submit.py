from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..errors import IncompleteScrobbleError
from ..lastfm import Accepted, Ignored, ScrobbleOutcome, Track
from .timeline import PlannedScrobble, plan_timeline

if TYPE_CHECKING:
    from ..lastfm import LastfmClient

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BatchProgress:
    """Outcome of the tracks submitted so far in an album batch."""

    accepted: tuple[Track, ...] = ()
    ignored: tuple[tuple[Track, Ignored], ...] = ()

    def record(self, track: Track, outcome: ScrobbleOutcome) -> BatchProgress:
        if isinstance(outcome, Ignored):
            return BatchProgress(self.accepted, self.ignored + ((track, outcome),))
        return BatchProgress(self.accepted + (track,), self.ignored)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.ignored)

    @property
    def complete(self) -> bool:
        return not self.ignored


def log_plan(artist: str, plan: list[PlannedScrobble]) -> None:
    """Log the planned scrobbles, used for dry runs."""
    for index, entry in enumerate(plan, start=1):
        log.info(
            "%d/%d %s - %s at %s (%ds)",
            index,
            len(plan),
            artist,
            entry.track.title,
            entry.timestamp.isoformat(timespec="seconds"),
            entry.track.duration,
        )


def submit_plan(client: LastfmClient, artist: str, plan: list[PlannedScrobble]) -> BatchProgress:
    """Scrobble every planned track in order.

    Ignored tracks are recorded and the batch continues; transport and
    parse errors propagate immediately.
    """
    progress = BatchProgress()
    for index, entry in enumerate(plan, start=1):
        outcome = client.scrobble(artist, entry.track.title, entry.timestamp)
        if isinstance(outcome, Ignored):
            log.warning("%d/%d %s not scrobbled: %s", index, len(plan), entry.track.title, outcome)
        else:
            log.info("%d/%d %s scrobbled", index, len(plan), entry.track.title)
        progress = progress.record(entry.track, outcome)
    return progress


def scrobble_track(
    client: LastfmClient,
    artist: str,
    track: str,
    when: datetime,
    dryrun: bool = False,
) -> ScrobbleOutcome | None:
    """Scrobble a single track played at ``when``.

    An ignored scrobble is logged but not treated as a failure. Returns None
    for a dry run.
    """
    if when.tzinfo is None:
        raise ValueError("scrobble time must be timezone-aware")
    if dryrun:
        log.info("Dry run: would scrobble %s - %s at %s", artist, track, when.isoformat(timespec="seconds"))
        return None

    outcome = client.scrobble(artist, track, when)
    if isinstance(outcome, Ignored):
        log.warning("Not scrobbled due to: %s", outcome)
    elif isinstance(outcome, Accepted):
        log.info("Scrobbled %s - %s", artist, track)
    return outcome


def scrobble_album(
    client: LastfmClient,
    artist: str,
    album: str,
    reference_time: datetime,
    offset: timedelta = timedelta(0),
    dryrun: bool = False,
) -> list[PlannedScrobble]:
    """Look up an album and scrobble all of its tracks as if just played.

    Returns the plan that was (or, for a dry run, would have been) submitted.

    Raises:
        EmptyAlbumError: the album lists no tracks
        IncompleteScrobbleError: one or more tracks were ignored
    """
    info = client.lookup_album(artist, album)
    log.info(
        "Found album '%s' with %d tracks (%ds)%s",
        info.title,
        len(info.tracks),
        info.total_duration,
        f" at {info.url}" if info.url else "",
    )

    plan = plan_timeline(info, reference_time, offset)
    if dryrun:
        log.info("Dry run: planned scrobbles")
        log_plan(artist, plan)
        return plan

    progress = submit_plan(client, artist, plan)
    if not progress.complete:
        raise IncompleteScrobbleError(list(progress.ignored), progress.total)
    log.info("Scrobbled all %d tracks of '%s'", progress.total, info.title)
    return plan
