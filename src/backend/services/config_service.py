"""
System settings service.

Wraps the config repository with validation and domain error messages.
"""

from typing import Any, Optional

import structlog

from core.errors import InputValidationError, StoreError
from core.validation import MAX_INTERVAL_SECONDS, is_valid_interval
from models.documents import ConfigDocument
from repositories.provider import ConfigRepositoryProtocol

logger = structlog.get_logger(__name__)

MIN_UPDATE_INTERVAL_SECONDS = 1

CONFIG_FIELDS = frozenset(
    {"voting_enabled", "results_visible", "update_interval", "aggregation_enabled", "current_group"}
)


class ConfigService:
    """Reads and updates the system settings document."""

    def __init__(self, config_repo: ConfigRepositoryProtocol):
        self.config_repo = config_repo

    async def get_config(self) -> ConfigDocument:
        """
        Get the current settings, creating the defaults on first read.

        Raises:
            StoreError: If the settings cannot be read.
        """
        try:
            return await self.config_repo.get()
        except Exception as e:
            logger.error("config_fetch_failed", error=str(e))
            raise StoreError("Failed to fetch system settings") from e

    async def update_config(self, patch: dict[str, Any]) -> ConfigDocument:
        unknown = set(patch) - CONFIG_FIELDS
        if unknown:
            raise InputValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        if "update_interval" in patch:
            interval = patch["update_interval"]
            if not is_valid_interval(interval) or interval < MIN_UPDATE_INTERVAL_SECONDS:
                raise InputValidationError(
                    f"Update interval must be between {MIN_UPDATE_INTERVAL_SECONDS} "
                    f"and {MAX_INTERVAL_SECONDS} seconds"
                )

        try:
            config = await self.config_repo.update(patch)
        except Exception as e:
            logger.error("config_update_failed", error=str(e), fields=sorted(patch))
            raise StoreError("Failed to update system settings") from e

        logger.info("config_updated", fields=sorted(patch))
        return config

    async def set_voting_enabled(self, enabled: bool) -> ConfigDocument:
        return await self.update_config({"voting_enabled": enabled})

    async def set_results_visible(self, visible: bool) -> ConfigDocument:
        return await self.update_config({"results_visible": visible})

    async def set_update_interval(self, interval: float) -> ConfigDocument:
        return await self.update_config({"update_interval": interval})

    async def set_current_group(self, group_id: Optional[str]) -> ConfigDocument:
        return await self.update_config({"current_group": group_id})

    async def is_voting_enabled(self) -> bool:
        config = await self.get_config()
        return config.voting_enabled

    async def are_results_visible(self) -> bool:
        config = await self.get_config()
        return config.results_visible
