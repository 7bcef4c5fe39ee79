from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ConfigError

if TYPE_CHECKING:
    from .config import Settings

log = logging.getLogger(__name__)

_FIELDS = ("api_key", "api_secret", "session_key")


@dataclass(frozen=True)
class Credentials:
    """Last.fm API key pair plus the session key obtained by the handshake."""

    api_key: str
    api_secret: str
    session_key: str = ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.session_key)


class CredentialStore:
    """JSON file holding the credentials between invocations, written atomically."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Credentials | None:
        """Load stored credentials.

        Returns:
            Credentials, or None if nothing has been stored yet

        Raises:
            ConfigError: the file exists but cannot be read or is incomplete
        """
        if not self.path.exists():
            log.debug("No credentials stored at %s", self.path)
            return None

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"corrupted credentials file {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"cannot read credentials file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"corrupted credentials file {self.path}")
        missing = [k for k in ("api_key", "api_secret") if not isinstance(data.get(k), str)]
        if missing:
            raise ConfigError(f"credentials file {self.path} lacks {', '.join(missing)}")

        log.info("Using credentials file %s", self.path)
        return Credentials(
            api_key=data["api_key"],
            api_secret=data["api_secret"],
            session_key=str(data.get("session_key") or ""),
        )

    def save(self, credentials: Credentials) -> None:
        """Write credentials atomically, readable by the owner only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.path.with_suffix(".tmp")
        try:
            fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(asdict(credentials), f, indent=2)
            temp_file.replace(self.path)
        except OSError as e:
            raise ConfigError(f"cannot write credentials file {self.path}: {e}") from e
        log.info("Saved credentials to %s", self.path)

    def clear(self) -> None:
        if self.path.exists():
            log.info("Removing credentials file %s", self.path)
            self.path.unlink()


def resolve_credentials(settings: Settings, store: CredentialStore) -> Credentials:
    """Stored credentials overlaid with any credentials set in the environment."""
    stored = store.load()
    overrides = {
        "api_key": settings.api_key,
        "api_secret": settings.api_secret,
        "session_key": settings.session_key,
    }
    overrides = {k: v for k, v in overrides.items() if v}

    if stored is None:
        if "api_key" not in overrides or "api_secret" not in overrides:
            raise ConfigError(
                f"no credentials found in {store.path}; run the auth command "
                "or set LASTFM_API_KEY and LASTFM_API_SECRET"
            )
        return Credentials(**{k: overrides.get(k, "") for k in _FIELDS})

    return replace(stored, **overrides)
