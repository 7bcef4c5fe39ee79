from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import partial

import requests

from .config import Settings
from .context import RuntimeContext
from .credentials import Credentials, CredentialStore, resolve_credentials
from .errors import IncompleteScrobbleError, ScrobblerError
from .handshake import ConfirmCallback, authenticate, confirm_on_terminal
from .lastfm import Ignored, LastfmClient, enable_ipv4_only
from .links import parse_album_url
from .scrobbler import scrobble_album, scrobble_track

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Pass/fail result of one command with a human-readable reason."""

    ok: bool
    reason: str = ""


def build_context(
    settings: Settings,
    credentials: Credentials | None = None,
    session: requests.Session | None = None,
) -> RuntimeContext:
    """Assemble the store and client; credentials default to the stored ones."""
    store = CredentialStore(settings.credentials_file)
    if credentials is None:
        credentials = resolve_credentials(settings, store)
    client = LastfmClient(
        credentials,
        session=session,
        api_root=settings.api_root,
        timeout=settings.http_timeout,
    )
    return RuntimeContext(settings=settings, store=store, client=client)


def _run_auth(ctx: RuntimeContext, confirm: ConfirmCallback) -> str:
    session_key = authenticate(ctx.client, confirm)
    creds = ctx.client.credentials
    ctx.store.save(Credentials(creds.api_key, creds.api_secret, session_key))
    return "authenticated"


def _run_scrobble(ctx: RuntimeContext, args: argparse.Namespace, now: datetime) -> str:
    offset: timedelta = args.start or timedelta(0)

    if args.url:
        artist, album = parse_album_url(args.url)
        log.info("Resolved link to artist '%s', album '%s'", artist, album)
    else:
        artist, album = args.artist, args.album

    if album:
        plan = scrobble_album(ctx.client, artist, album, now, offset, dryrun=args.dryrun)
        return f"{'planned' if args.dryrun else 'scrobbled'} {len(plan)} tracks"

    outcome = scrobble_track(ctx.client, artist, args.track, now - offset, dryrun=args.dryrun)
    if outcome is None:
        return "dry run"
    if isinstance(outcome, Ignored):
        return f"track ignored: {outcome}"
    return "scrobbled"


def run(
    settings: Settings,
    args: argparse.Namespace,
    confirm: ConfirmCallback | None = None,
    session: requests.Session | None = None,
    now: datetime | None = None,
) -> OperationResult:
    """Run the command selected on the command line."""
    if settings.force_ipv4:
        enable_ipv4_only()

    try:
        if args.command == "auth":
            ctx = build_context(settings, Credentials(args.api_key, args.secret_key), session)
            if confirm is None:
                confirm = partial(confirm_on_terminal, open_browser=settings.open_browser)
            reason = _run_auth(ctx, confirm)
        else:
            ctx = build_context(settings, session=session)
            reason = _run_scrobble(ctx, args, now or datetime.now(UTC))
    except IncompleteScrobbleError as e:
        for track, ignored in e.ignored:
            log.error("Ignored: %s (%s)", track.title, ignored)
        log.error("Error: %s", e)
        return OperationResult(False, str(e))
    except (ScrobblerError, ValueError) as e:
        log.error("Error: %s", e)
        return OperationResult(False, str(e))

    log.info("Done")
    return OperationResult(True, reason)
