# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the handler chain.
"""

from core.config.defaults import (
    ChainDefaults,
    LoggingDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "ChainDefaults",
    "LoggingDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
