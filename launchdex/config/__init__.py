"""
Launchdex Unified Configuration

Loads all sections of launchdex.toml.
Environment variables override TOML values.
"""

from .loader import (
    AMMConfig,
    AMMSectionConfig,
    LaunchdexConfig,
    LaunchpadConfig,
    LaunchpadSectionConfig,
    LoggingSectionConfig,
    OracleConfig,
    OracleSectionConfig,
    load_config,
)

__all__ = [
    "AMMConfig",
    "AMMSectionConfig",
    "LaunchdexConfig",
    "LaunchpadConfig",
    "LaunchpadSectionConfig",
    "LoggingSectionConfig",
    "OracleConfig",
    "OracleSectionConfig",
    "load_config",
]
