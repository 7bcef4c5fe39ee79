from .client import (
    DEFAULT_TRACK_DURATION,
    LastfmClient,
    disable_ipv4_only,
    enable_ipv4_only,
)
from .models import Accepted, Album, Ignored, ScrobbleOutcome, Track
from .signing import sign, signed

__all__ = [
    "LastfmClient",
    "DEFAULT_TRACK_DURATION",
    "enable_ipv4_only",
    "disable_ipv4_only",
    "Accepted",
    "Album",
    "Ignored",
    "ScrobbleOutcome",
    "Track",
    "sign",
    "signed",
]
