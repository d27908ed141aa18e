# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for registration and logging
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the handler chain and its logging.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ChainDefaults:
    """
    Defaults for handler registration.

    Lower priority runs earlier.
    """
    default_priority: int = 10

    @classmethod
    def from_env(cls) -> "ChainDefaults":
        """Create from environment variables."""
        return cls(
            default_priority=int(os.getenv("HANDLER_CHAIN_DEFAULT_PRIORITY", 10)),
        )


@dataclass(frozen=True)
class LoggingDefaults:
    """
    Defaults for log output.
    """
    level: str = "INFO"
    json_output: bool = False

    @classmethod
    def from_env(cls) -> "LoggingDefaults":
        """Create from environment variables."""
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            json_output=os.getenv("LOG_FORMAT", "").lower() == "json",
        )


@dataclass
class Defaults:
    """Container for all default configurations."""
    chain: ChainDefaults = field(default_factory=ChainDefaults)
    logging: LoggingDefaults = field(default_factory=LoggingDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            chain=ChainDefaults.from_env(),
            logging=LoggingDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ChainDefaults",
    "LoggingDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
