import sys

from offline_scrobbler.cli import parse_args
from offline_scrobbler.config import Settings, configure_logging
from offline_scrobbler.main import run as _run


def run():
    """Entry point for offline-scrobbler command."""
    args = parse_args()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    result = _run(settings, args)
    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    run()
