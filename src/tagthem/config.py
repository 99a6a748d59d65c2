"""Runtime settings for tagthem."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Process-level settings.

    Attributes:
        config_path: Rules/extractors YAML file, if configured
        log_level: Logging level name for the CLI
        case_sensitive: Only accept lowercase DSL keywords
    """

    config_path: Path | None = None
    log_level: str = "WARNING"
    case_sensitive: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables.

        - TAGTHEM_CONFIG: path to the YAML configuration
        - TAGTHEM_LOG_LEVEL: DEBUG, INFO, WARNING, ... (default WARNING)
        - TAGTHEM_CASE_SENSITIVE: 1/true/yes/on to require lowercase keywords
        """
        config_path = os.environ.get("TAGTHEM_CONFIG")
        return cls(
            config_path=Path(config_path) if config_path else None,
            log_level=os.environ.get("TAGTHEM_LOG_LEVEL", "WARNING").upper(),
            case_sensitive=(
                os.environ.get("TAGTHEM_CASE_SENSITIVE", "").lower() in _TRUE_VALUES
            ),
        )


def configure_logging(level: str) -> None:
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
