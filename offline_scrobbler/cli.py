"""Command line interface for offline-scrobbler."""

import argparse
import re
from datetime import timedelta

_UNITS = {
    "s": 1,
    "sec": 1,
    "m": 60,
    "min": 60,
    "h": 3600,
    "d": 86400,
}
_GROUP_RE = re.compile(r"(\d+)\s*(sec|min|s|m|h|d)", re.IGNORECASE)


def parse_offset(text: str) -> timedelta:
    """Parse how long ago playback ended, e.g. ``90``, ``10m`` or ``1h 30m``."""
    value = text.strip()
    if value.isdigit():
        return timedelta(seconds=int(value))

    seconds = 0
    pos = 0
    for match in _GROUP_RE.finditer(value):
        if value[pos : match.start()].strip():
            break
        seconds += int(match.group(1)) * _UNITS[match.group(2).lower()]
        pos = match.end()

    if pos == 0 or value[pos:].strip():
        raise ValueError(f"invalid duration: {text!r}")
    return timedelta(seconds=seconds)


def _offset_arg(text: str) -> timedelta:
    try:
        return parse_offset(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="offline-scrobbler",
        description="Scrobble music to Last.fm without playing it online",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    auth_parser = subparsers.add_parser("auth", help="Authenticate with Last.fm and store a session key")
    auth_parser.add_argument("--api-key", required=True, help="Last.fm API key")
    auth_parser.add_argument("--secret-key", required=True, help="Last.fm shared secret")

    scrobble_parser = subparsers.add_parser("scrobble", help="Scrobble a track or a whole album")
    scrobble_parser.add_argument("--artist", help="Artist name")
    what = scrobble_parser.add_mutually_exclusive_group(required=True)
    what.add_argument("--track", help="Track title")
    what.add_argument("--album", help="Album title, every track is scrobbled")
    what.add_argument("--url", help="Last.fm album page, e.g. https://www.last.fm/music/Artist/Album")
    scrobble_parser.add_argument(
        "-d",
        "--dryrun",
        action="store_true",
        help="Dry run mode (no writes done)",
    )
    scrobble_parser.add_argument(
        "--start",
        type=_offset_arg,
        default=None,
        help="How long ago playback ended, e.g. 10m or 1h 30m (default: now)",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments, validating option combinations."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "scrobble" and not args.url and not args.artist:
        parser.error("--artist is required unless --url is given")
    if args.command == "scrobble" and args.url and args.artist:
        parser.error("--artist cannot be combined with --url, the link names the artist")
    return args
