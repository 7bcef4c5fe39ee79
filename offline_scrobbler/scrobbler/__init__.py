from .submit import (
    BatchProgress,
    log_plan,
    scrobble_album,
    scrobble_track,
    submit_plan,
)
from .timeline import TRACK_GAP, PlannedScrobble, plan_timeline

__all__ = [
    "TRACK_GAP",
    "PlannedScrobble",
    "plan_timeline",
    "BatchProgress",
    "log_plan",
    "submit_plan",
    "scrobble_track",
    "scrobble_album",
]
