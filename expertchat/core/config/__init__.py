# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading YAML configuration files (blocklists)

Example:
    >>> from expertchat.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from expertchat.core.config.settings import (
    AlertSettings,
    APISettings,
    CORSSettings,
    DatabaseSettings,
    ModerationSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    SimilaritySettings,
    WorkerSettings,
    clear_settings_cache,
    get_settings,
)
from expertchat.core.config.yaml_loader import (
    YAMLLoadError,
    load_word_list,
    load_yaml,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "RedisSettings",
    "SimilaritySettings",
    "ModerationSettings",
    "AlertSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
    "WorkerSettings",
    # YAML utilities
    "load_yaml",
    "load_word_list",
    "YAMLLoadError",
]
