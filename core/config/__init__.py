# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Process settings (environment) and the controller config (config map).
"""

from core.config.defaults import (
    ControllerSettings,
    get_settings,
    reset_settings,
)
from core.config.controller_config import (
    SecretKeySelector,
    S3ArtifactRepository,
    ArtifactRepository,
    ControllerConfig,
    ConfigHolder,
    default_executor_image,
)

__all__ = [
    "ControllerSettings",
    "get_settings",
    "reset_settings",
    "SecretKeySelector",
    "S3ArtifactRepository",
    "ArtifactRepository",
    "ControllerConfig",
    "ConfigHolder",
    "default_executor_image",
]
