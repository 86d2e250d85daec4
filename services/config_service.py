# ============================================================================
# CONFIG SERVICE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Service - Controller configuration loading
# PURPOSE: Reload ControllerConfig from the config map and validate its secrets
# CREATED: 19 OCT 2026
# ============================================================================
"""
Config Service

resync() reloads the controller configuration:

1. Read the config map named by settings.config_map
2. Take the YAML blob under its `config` key
3. Parse into ControllerConfig
4. If an S3 artifact repository is configured, check that both referenced
   secret keys exist and are non-empty
5. Fill in the default executor image if none is given
6. Publish through ConfigHolder.swap()

Every failure raises ConfigurationError and leaves the active config as
it was. Nothing is retried; callers decide whether to try again.
"""

import logging
from typing import Optional

import yaml
from pydantic import ValidationError

from core.config import (
    ConfigHolder,
    ControllerConfig,
    ControllerSettings,
    S3ArtifactRepository,
    default_executor_image,
    get_settings,
)
from core.contracts import CONFIG_MAP_KEY
from core.errors import ConfigurationError
from core.logging import log_checkpoint
from core.models import ConfigMap, Secret
from infrastructure.base_repository import RepositoryError
from infrastructure.cluster import ResourceStore

logger = logging.getLogger(__name__)


async def validate_s3_repository(
    s3: S3ArtifactRepository,
    secret_store: ResourceStore[Secret],
) -> None:
    """
    Check that the S3 credential secrets exist and hold non-empty values.

    Raises:
        ConfigurationError: A secret could not be read, or its key is
            missing or empty
    """
    for selector in (s3.access_key_secret, s3.secret_key_secret):
        try:
            secret = await secret_store.get(selector.name)
        except RepositoryError as e:
            raise ConfigurationError(
                f"Failed to read secret '{selector.name}': {e}",
                resource=selector.name,
            ) from e

        if not secret.data.get(selector.key):
            raise ConfigurationError(
                f"secret '{selector.name}' key '{selector.key}' empty",
                resource=selector.name,
            )


class ConfigResynchronizer:
    """
    Loads ControllerConfig from the controller's config map.

    Triggered at startup and on demand through the API; there is no
    watch on the config map.
    """

    def __init__(
        self,
        config_map_store: ResourceStore[ConfigMap],
        secret_store: ResourceStore[Secret],
        holder: ConfigHolder,
        settings: Optional[ControllerSettings] = None,
    ):
        """
        Initialize resynchronizer.

        Args:
            config_map_store: Store holding the controller config map
            secret_store: Store holding the artifact repository secrets
            holder: Holder the loaded config is published to
            settings: Names the config map (defaults to environment settings)
        """
        self.config_map_store = config_map_store
        self.secret_store = secret_store
        self.holder = holder
        self.settings = settings or get_settings()

    async def resync(self) -> ControllerConfig:
        """
        Reload and publish the controller config.

        Returns:
            The config now active

        Raises:
            ConfigurationError: Config map unreadable, missing its key,
                malformed, or referencing unusable secrets
        """
        name = self.settings.config_map
        try:
            config_map = await self.config_map_store.get(name)
        except RepositoryError as e:
            raise ConfigurationError(
                f"Failed to read ConfigMap '{name}': {e}",
                resource=name,
            ) from e

        raw = config_map.data.get(CONFIG_MAP_KEY)
        if raw is None:
            raise ConfigurationError(
                f"ConfigMap '{name}' does not have key '{CONFIG_MAP_KEY}'",
                resource=name,
            )

        config = self._parse(name, raw)
        logger.info(f"Workflow controller configuration from {name}:\n{raw}")

        if config.artifact_repository.s3 is not None:
            await validate_s3_repository(config.artifact_repository.s3, self.secret_store)

        if not config.executor_image:
            config = config.model_copy(update={"executor_image": default_executor_image()})

        self.holder.swap(config)
        logger.info(
            f"Controller config applied (generation={self.holder.generation}, "
            f"executor_image={config.executor_image})"
        )
        log_checkpoint("config_resynced", {"generation": self.holder.generation})
        return config

    @staticmethod
    def _parse(name: str, raw: str) -> ControllerConfig:
        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"ConfigMap '{name}' key '{CONFIG_MAP_KEY}' is not valid YAML: {e}",
                resource=name,
            ) from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigurationError(
                f"ConfigMap '{name}' key '{CONFIG_MAP_KEY}' must be a mapping",
                resource=name,
            )

        try:
            return ControllerConfig.model_validate(document)
        except ValidationError as e:
            raise ConfigurationError(
                f"ConfigMap '{name}' key '{CONFIG_MAP_KEY}' is invalid: {e}",
                resource=name,
            ) from e


__all__ = ["ConfigResynchronizer", "validate_s3_repository"]
