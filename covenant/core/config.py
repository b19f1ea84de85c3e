"""
Covenant Ledger Configuration

Configuration for the ledger engine including:
- Storage location (file or in-memory)
- Text length bounds for titles, descriptions and metadata
- Optional hard signature cap
- Logging level

Loaded from environment variables or a YAML/JSON file.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes")


@dataclass
class LedgerConfig:
    """Configuration for the agreement ledger."""

    # Storage (None = in-memory)
    db_path: Optional[Path] = None

    # Text bounds
    max_title_length: int = 256
    max_description_length: int = 4096
    max_metadata_length: int = 1024
    max_principal_length: int = 128

    # Reject signatures once required_signatures is met
    enforce_signature_cap: bool = False

    log_level: str = "INFO"

    def __post_init__(self):
        if self.db_path is not None and not isinstance(self.db_path, Path):
            self.db_path = Path(self.db_path)
        for name in (
            "max_title_length",
            "max_description_length",
            "max_metadata_length",
            "max_principal_length",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.enforce_signature_cap, bool):
            raise ValueError(
                f"enforce_signature_cap must be a boolean, got {self.enforce_signature_cap!r}"
            )
        if logging.getLevelName(str(self.log_level).upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL,
        ):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        """Create from dictionary.

        Raises:
            ValueError: If the data is not a mapping or holds unknown keys
        """
        if not isinstance(data, dict):
            raise ValueError(f"Ledger config must be a dictionary, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown ledger config keys: {', '.join(sorted(unknown))}")

        try:
            return cls(**data)
        except TypeError as e:
            raise ValueError(f"Invalid ledger config parameters: {e}") from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "LedgerConfig":
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            raise ValueError(f"Config file not found: {path}")

        text = path.read_text(encoding="utf-8")
        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        # An empty YAML document means all defaults
        config = cls.from_dict(data or {})
        logger.debug(f"Loaded ledger config from {path}")
        return config

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create configuration from environment variables."""
        db_path = os.getenv("COVENANT_DB_PATH")
        return cls(
            db_path=Path(db_path) if db_path else None,
            max_title_length=int(os.getenv("COVENANT_MAX_TITLE_LENGTH", "256")),
            max_description_length=int(os.getenv("COVENANT_MAX_DESCRIPTION_LENGTH", "4096")),
            max_metadata_length=int(os.getenv("COVENANT_MAX_METADATA_LENGTH", "1024")),
            max_principal_length=int(os.getenv("COVENANT_MAX_PRINCIPAL_LENGTH", "128")),
            enforce_signature_cap=os.getenv("COVENANT_ENFORCE_SIGNATURE_CAP", "").lower() in _TRUTHY,
            log_level=os.getenv("COVENANT_LOG_LEVEL", "INFO"),
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler for applications embedding the ledger."""
    level_name = (level or get_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# Global configuration instance
_config: Optional[LedgerConfig] = None


def get_config() -> LedgerConfig:
    """Get the global ledger configuration."""
    global _config
    if _config is None:
        _config = LedgerConfig.from_env()
    return _config


def set_config(config: Optional[LedgerConfig]) -> None:
    """Set (or with None, reset) the global ledger configuration."""
    global _config
    _config = config
