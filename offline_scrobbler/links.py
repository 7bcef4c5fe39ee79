import re
from urllib.parse import unquote_plus, urlsplit

_HOST_RE = re.compile(r"^(www\.)?last\.fm$", re.IGNORECASE)
_LANG_RE = re.compile(r"^[a-z]{2}(-[a-z]{2})?$", re.IGNORECASE)


def parse_album_url(url: str) -> tuple[str, str]:
    """Extract ``(artist, album)`` from a Last.fm album page link.

    Accepts ``https://www.last.fm/music/{Artist}/{Album}`` with optional
    language prefix (``/de/music/...``) and trailing path segments.
    """
    parts = urlsplit(url.strip())
    if parts.scheme not in {"http", "https"} or not _HOST_RE.match(parts.hostname or ""):
        raise ValueError(f"not a Last.fm link: {url}")

    segments = [s for s in parts.path.split("/") if s]
    if segments and _LANG_RE.match(segments[0]):
        segments = segments[1:]
    if len(segments) < 3 or segments[0] != "music":
        raise ValueError(f"not a Last.fm album link: {url}")

    # "/music/{Artist}/_/{Track}" and "/music/{Artist}/+tracks" are not albums
    if segments[2] == "_" or segments[2].startswith("+"):
        raise ValueError(f"not a Last.fm album link: {url}")

    artist = unquote_plus(segments[1]).strip()
    album = unquote_plus(segments[2]).strip()
    if not artist or not album:
        raise ValueError(f"not a Last.fm album link: {url}")
    return artist, album
