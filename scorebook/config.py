"""
Configuration management for the scoring engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class MatchFormat(Enum):
    T20 = "t20"
    ODI = "odi"


@dataclass(frozen=True)
class MatchDefaults:
    """Defaults applied when a match is created without explicit values."""
    overs_limit: int = 20
    roster_size: int = 11  # Used only when a team's roster is unknown


@dataclass(frozen=True)
class StorageConfig:
    """Event log storage configuration."""
    db_path: str = "scorebook.db"
    in_memory: bool = False


@dataclass
class ScorerConfig:
    """Top-level scorer configuration."""
    match: MatchDefaults = field(default_factory=MatchDefaults)
    storage: StorageConfig = field(default_factory=StorageConfig)

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ScorerConfig":
        """Load configuration from environment variables."""
        return cls(
            match=MatchDefaults(
                overs_limit=int(os.getenv("SCOREBOOK_OVERS_LIMIT", "20")),
                roster_size=int(os.getenv("SCOREBOOK_ROSTER_SIZE", "11")),
            ),
            storage=StorageConfig(
                db_path=os.getenv("SCOREBOOK_DB_PATH", "scorebook.db"),
                in_memory=os.getenv("SCOREBOOK_IN_MEMORY", "").lower() == "true",
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Format-specific constants
FORMAT_OVERS: dict[MatchFormat, Optional[int]] = {
    MatchFormat.T20: 20,
    MatchFormat.ODI: 50,
}

BALLS_PER_OVER = 6
