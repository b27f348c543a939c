from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SyncConfig:
    enabled: bool = os.getenv("PLATEWATCH_SYNC_ENABLED", "true").lower() != "false"
    push_timeout: float = float(os.getenv("PLATEWATCH_PUSH_TIMEOUT", "5.0"))


DEFAULT_SYNC_CONFIG = SyncConfig()
