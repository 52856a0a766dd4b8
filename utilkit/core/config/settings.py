"""
Settings - Library configuration using dataclasses.

Environment variables:
- MEMORY_BACKEND: cpython, manual
- MANUAL_MAX_GENERATION: oldest generation the manual memory manager reports

Log level and JSON output are configured by LoggingConfig
(logging-config.yaml plus LOG_LEVEL / LOG_JSON_FORMAT overrides).
"""

import os
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field

from ..errors import ConfigurationError


class MemoryBackend(str, Enum):
    """Memory manager backends."""
    CPYTHON = "cpython"
    MANUAL = "manual"


def _env_enum(enum_cls, var: str, default: str):
    raw = os.getenv(var, default)
    try:
        return enum_cls(raw.lower())
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid value for {var}: {raw!r}",
            data={"variable": var, "value": raw,
                  "allowed": [member.value for member in enum_cls]},
            cause=e,
        )


def _env_int(var: str, default: int) -> int:
    raw = os.getenv(var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid integer for {var}: {raw!r}",
            data={"variable": var, "value": raw},
            cause=e,
        )


@dataclass
class Settings:
    """Library settings from environment."""

    # Memory manager
    memory_backend: MemoryBackend = field(
        default_factory=lambda: _env_enum(MemoryBackend, "MEMORY_BACKEND", "cpython")
    )
    manual_max_generation: int = field(
        default_factory=lambda: _env_int("MANUAL_MAX_GENERATION", 2)
    )

    def __post_init__(self):
        if self.manual_max_generation < 0:
            raise ConfigurationError(
                "MANUAL_MAX_GENERATION must be non-negative",
                data={"value": self.manual_max_generation},
            )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the environment is read again."""
    global _settings
    _settings = None
