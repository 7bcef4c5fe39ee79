from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Settings
    from .credentials import CredentialStore
    from .lastfm import LastfmClient


@dataclass
class RuntimeContext:
    """Dependencies shared by the commands of one invocation."""

    settings: Settings
    store: CredentialStore
    client: LastfmClient
