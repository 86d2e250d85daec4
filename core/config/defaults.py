# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Process settings
# PURPOSE: Environment-driven settings for watches and config loading
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Process-level settings read once from the environment. These are distinct
from the ControllerConfig loaded from the config map: settings say where
to look and how often, the config map says what the controller does.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ControllerSettings:
    """
    Settings for the workflow pod controller.

    Watch timing applies to the list-and-poll informers; resync_period of
    0 disables periodic full redelivery.
    """
    # Namespace watched for pods and holding the config map and secrets
    namespace: str = "default"

    # Config map holding the controller configuration
    config_map: str = "workflow-controller-configmap"

    # Watch timing (seconds)
    poll_interval: float = 1.0
    resync_period: float = 300.0

    # Executor image repository, tagged with the controller version by default
    executor_image_repo: str = "rmh/workflow-executor"

    @classmethod
    def from_env(cls) -> "ControllerSettings":
        """Create from environment variables."""
        return cls(
            namespace=os.getenv("CONTROLLER_NAMESPACE", "default"),
            config_map=os.getenv("CONTROLLER_CONFIGMAP", "workflow-controller-configmap"),
            poll_interval=float(os.getenv("WATCH_POLL_INTERVAL", 1.0)),
            resync_period=float(os.getenv("WATCH_RESYNC_PERIOD", 300.0)),
            executor_image_repo=os.getenv("EXECUTOR_IMAGE_REPO", "rmh/workflow-executor"),
        )


# Global settings instance
_settings: Optional[ControllerSettings] = None


def get_settings() -> ControllerSettings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        _settings = ControllerSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None


__all__ = [
    "ControllerSettings",
    "get_settings",
    "reset_settings",
]
