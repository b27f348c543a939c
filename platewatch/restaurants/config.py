from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class CatalogConfig:
    seed_path: Path = Path(
        os.getenv(
            "PLATEWATCH_SEED_CSV",
            str(Path(__file__).resolve().parent.parent / "data" / "restaurants.csv"),
        )
    )
    location: str = os.getenv("PLATEWATCH_LOCATION", "Albuquerque, New Mexico")
    default_base_points: int = 100
    best_this_week_size: int = 10
    standings_size: int = 50


DEFAULT_CATALOG_CONFIG = CatalogConfig()
