import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "offline-scrobbler"

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _str_to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _str_to_float(val: str | None, default: float | None) -> float | None:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Application configuration loaded from environment variables."""

    api_key: str = ""
    api_secret: str = ""
    session_key: str = ""
    config_dir: str = str(DEFAULT_CONFIG_DIR)
    credentials_file: str = str(DEFAULT_CONFIG_DIR / "credentials.json")
    api_root: str = "https://ws.audioscrobbler.com/2.0"
    http_timeout: float | None = None
    force_ipv4: bool = False
    open_browser: bool = True
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "Settings":
        """Load settings from environment variables."""
        config_dir = os.getenv("CONFIG_DIR", str(DEFAULT_CONFIG_DIR))
        credentials_file = os.getenv("CREDENTIALS_FILE", str(Path(config_dir) / "credentials.json"))

        http_timeout = _str_to_float(os.getenv("LASTFM_HTTP_TIMEOUT"), None)
        if http_timeout is not None and http_timeout <= 0:
            http_timeout = None

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            log_level = "INFO"

        return Settings(
            api_key=os.getenv("LASTFM_API_KEY", "").strip(),
            api_secret=os.getenv("LASTFM_API_SECRET", "").strip(),
            session_key=os.getenv("LASTFM_SESSION_KEY", "").strip(),
            config_dir=config_dir,
            credentials_file=credentials_file,
            api_root=os.getenv("LASTFM_API_ROOT", "https://ws.audioscrobbler.com/2.0"),
            http_timeout=http_timeout,
            force_ipv4=_str_to_bool(os.getenv("LASTFM_FORCE_IPV4"), False),
            open_browser=_str_to_bool(os.getenv("OPEN_BROWSER"), True),
            log_level=log_level,
        )


def configure_logging(level: str) -> None:
    """Configure logging with the specified level."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s: %(message)s",
    )
