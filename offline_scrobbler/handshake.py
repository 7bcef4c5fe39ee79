"""Interactive Last.fm authentication.

The user authorizes a request token in the browser; the token is then
exchanged for a long-lived session key. Waiting for the user has no timeout.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import urlencode

if TYPE_CHECKING:
    from .lastfm import LastfmClient

log = logging.getLogger(__name__)

AUTH_URL = "https://www.last.fm/api/auth/"

ConfirmCallback = Callable[[str], None]


def authorization_url(api_key: str, token: str) -> str:
    return f"{AUTH_URL}?{urlencode({'api_key': api_key, 'token': token})}"


def confirm_on_terminal(url: str, open_browser: bool = False) -> None:
    """Show the authorization URL and block until the user presses Enter."""
    log.info("Please open the URL\n%s\nand confirm permission", url)
    if open_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            log.debug("Could not open browser: %s", e)

    try:
        input("Press Enter to continue...")
    except EOFError:
        log.warning("No terminal input available, continuing")
        return
    log.debug("Waiting done")


def authenticate(client: LastfmClient, confirm: ConfirmCallback) -> str:
    """Run the token handshake and return the new session key.

    Args:
        client: client holding the API key and secret
        confirm: called with the authorization URL; must return once the
            user has granted access

    Raises:
        LastfmError: either token call failed
    """
    token = client.request_token()
    url = authorization_url(client.credentials.api_key, token)

    confirm(url)

    session_key = client.get_session_key(token)
    log.info("Obtained session key")
    return session_key
