"""
Device identity.

Each client storage gets one ``device-<uuid4>`` id, generated on first use
and cached in memory for the life of the manager. Storage failures never
prevent handing out an id.
"""

import uuid
from typing import Optional

import structlog

from client.storage import KeyValueStorage
from core.errors import LocalStorageError
from core.validation import DEVICE_ID_PREFIX, is_valid_device_id

logger = structlog.get_logger(__name__)

DEVICE_ID_KEY = "livevote-device-id"


def generate_device_id() -> str:
    return f"{DEVICE_ID_PREFIX}{uuid.uuid4()}"


class DeviceIdManager:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._current: Optional[str] = None

    def get_device_id(self) -> str:
        """
        Return this client's device id, creating it if needed.

        A stored value that is not ``device-<uuid>`` is replaced. If the
        storage can't be read or written, a fresh id is still returned and
        cached in memory.
        """
        if self._current:
            return self._current

        try:
            stored = self.storage.get_item(DEVICE_ID_KEY)
        except LocalStorageError as e:
            logger.warning("device_id_storage_unavailable", error=str(e))
            stored = None

        if stored and is_valid_device_id(stored, strict=True):
            self._current = stored
            return stored

        device_id = generate_device_id()
        try:
            self.storage.set_item(DEVICE_ID_KEY, device_id)
        except LocalStorageError as e:
            logger.warning("device_id_save_failed", error=str(e))

        self._current = device_id
        return device_id

    def reset(self) -> None:
        """Forget the id in memory and in storage."""
        self._current = None
        try:
            self.storage.remove_item(DEVICE_ID_KEY)
        except LocalStorageError as e:
            logger.warning("device_id_remove_failed", error=str(e))
