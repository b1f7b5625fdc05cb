"""
Cosmos DB Config repository.

The system settings live in a single document that is created with
defaults the first time it is read.
"""

import logging
from typing import Any

from db.cosmos_session import CONFIG_CONTAINER, read_item, upsert_item
from models.documents import CONFIG_DOCUMENT_ID, ConfigDocument, utcnow

logger = logging.getLogger(__name__)


class CosmosConfigRepository:
    """Repository for the system settings document."""

    async def get(self) -> ConfigDocument:
        item = await read_item(CONFIG_CONTAINER, CONFIG_DOCUMENT_ID, partition_key=CONFIG_DOCUMENT_ID)
        if item is not None:
            return ConfigDocument(**item)

        config = ConfigDocument()
        await upsert_item(CONFIG_CONTAINER, config.model_dump(mode="json"))
        logger.info("Initialized system config with defaults")
        return config

    async def update(self, patch: dict[str, Any]) -> ConfigDocument:
        current = await self.get()
        updated = current.model_copy(update={**patch, "id": CONFIG_DOCUMENT_ID, "updated_at": utcnow()})
        await upsert_item(CONFIG_CONTAINER, updated.model_dump(mode="json"))
        return updated
