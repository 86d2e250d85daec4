# ============================================================================
# CONTROLLER CONFIG
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Controller configuration and its atomic holder
# PURPOSE: Config shape parsed from the config map, published by reference swap
# CREATED: 19 OCT 2026
# ============================================================================
"""
Controller Config

ControllerConfig is parsed from the YAML blob under the config map's
`config` key:

    executorImage: rmh/workflow-executor:v0.1.0
    artifactRepository:
      s3:
        bucket: my-bucket
        endpoint: s3.amazonaws.com
        accessKeySecret: {name: my-s3-credentials, key: accessKey}
        secretKeySecret: {name: my-s3-credentials, key: secretKey}
        keyPrefix: workflows/

Values are frozen. ConfigHolder publishes a new value by replacing one
reference, so readers see either the old config or the new one.
"""

import threading
from typing import Optional
from pydantic import BaseModel, Field

from __version__ import __version__
from core.config.defaults import get_settings


_FROZEN = {"frozen": True, "populate_by_name": True}


class SecretKeySelector(BaseModel):
    """Reference to one key inside a secret."""

    name: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)

    model_config = _FROZEN


class S3ArtifactRepository(BaseModel):
    """S3-compatible bucket used to store step artifacts."""

    bucket: str
    endpoint: str
    insecure: bool = False
    access_key_secret: SecretKeySelector = Field(..., alias="accessKeySecret")
    secret_key_secret: SecretKeySelector = Field(..., alias="secretKeySecret")
    key_prefix: str = Field(default="", alias="keyPrefix")

    model_config = _FROZEN


class ArtifactRepository(BaseModel):
    """Where the controller stores step artifacts (S3 is the only backend)."""

    s3: Optional[S3ArtifactRepository] = None

    model_config = _FROZEN


class ControllerConfig(BaseModel):
    """Controller configuration loaded from the config map."""

    executor_image: str = Field(default="", alias="executorImage")
    artifact_repository: ArtifactRepository = Field(
        default_factory=ArtifactRepository,
        alias="artifactRepository",
    )

    model_config = _FROZEN


def default_executor_image() -> str:
    """Executor image used when the config map does not name one."""
    return f"{get_settings().executor_image_repo}:v{__version__}"


class ConfigHolder:
    """
    Process-wide holder for the active ControllerConfig.

    Many readers, one writer (the config resynchronizer). get() is a
    plain attribute read; swap() replaces the reference under a lock so
    concurrent swaps are serialized.
    """

    def __init__(self, initial: Optional[ControllerConfig] = None):
        self._config = initial or ControllerConfig(executor_image=default_executor_image())
        self._lock = threading.Lock()
        self._generation = 0

    def get(self) -> ControllerConfig:
        return self._config

    def swap(self, config: ControllerConfig) -> ControllerConfig:
        """Publish a new config. Returns the one it replaced."""
        with self._lock:
            previous = self._config
            self._config = config
            self._generation += 1
            return previous

    @property
    def generation(self) -> int:
        """Number of successful swaps since startup."""
        return self._generation


__all__ = [
    "SecretKeySelector",
    "S3ArtifactRepository",
    "ArtifactRepository",
    "ControllerConfig",
    "ConfigHolder",
    "default_executor_image",
]
