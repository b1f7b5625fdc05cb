"""
Local vote history.

An advisory cache of the groups this client has voted for. It lets a UI
disable voting early, but only the server decides whether a vote is a
duplicate: a missing local record proves nothing.
"""

import json
import time
from dataclasses import asdict, dataclass
from typing import Optional

import structlog

from client.storage import KeyValueStorage
from core.errors import DuplicateVoteError, InputValidationError, LocalStorageError

logger = structlog.get_logger(__name__)

HISTORY_KEY = "livevote-vote-history"


@dataclass(frozen=True)
class VoteRecord:
    group_id: str
    voted_at: int  # client clock, milliseconds since the epoch


def _parse_record(item: object) -> Optional[VoteRecord]:
    if not isinstance(item, dict):
        return None
    group_id = item.get("group_id")
    voted_at = item.get("voted_at")
    if not isinstance(group_id, str):
        return None
    if not isinstance(voted_at, (int, float)) or isinstance(voted_at, bool):
        return None
    return VoteRecord(group_id=group_id, voted_at=int(voted_at))


class VoteHistoryManager:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._cache: Optional[list[VoteRecord]] = None

    def get_history(self) -> list[VoteRecord]:
        """
        Recorded votes in the order they were cast.

        Malformed entries are dropped. An unreadable store yields an empty
        list and is retried on the next call; corrupt data is cached as empty.
        """
        if self._cache is not None:
            return list(self._cache)

        try:
            stored = self.storage.get_item(HISTORY_KEY)
        except LocalStorageError as e:
            logger.warning("vote_history_unavailable", error=str(e))
            return []

        if not stored:
            self._cache = []
            return []

        try:
            raw = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.warning("vote_history_corrupt", error=str(e))
            self._cache = []
            return []

        if not isinstance(raw, list):
            self._cache = []
            return []

        self._cache = [record for record in map(_parse_record, raw) if record is not None]
        return list(self._cache)

    def has_voted(self, group_id: str) -> bool:
        if not group_id:
            return False
        return any(record.group_id == group_id for record in self.get_history())

    def record_vote(self, group_id: str) -> VoteRecord:
        """
        Remember a vote for ``group_id``.

        Raises:
            InputValidationError: No group id.
            DuplicateVoteError: The group is already recorded.
            LocalStorageError: The history could not be saved.
        """
        if not group_id:
            raise InputValidationError("Group ID is required")
        if self.has_voted(group_id):
            raise DuplicateVoteError()

        record = VoteRecord(group_id=group_id, voted_at=int(time.time() * 1000))
        history = self.get_history()
        history.append(record)

        try:
            self.storage.set_item(HISTORY_KEY, json.dumps([asdict(r) for r in history]))
        except LocalStorageError as e:
            self._cache = None
            raise LocalStorageError("Failed to save vote") from e

        self._cache = history
        return record

    def get_vote_record(self, group_id: str) -> Optional[VoteRecord]:
        return next((r for r in self.get_history() if r.group_id == group_id), None)

    def get_vote_count(self) -> int:
        return len(self.get_history())

    def clear_history(self) -> None:
        self._cache = None
        try:
            self.storage.remove_item(HISTORY_KEY)
        except LocalStorageError as e:
            logger.warning("vote_history_clear_failed", error=str(e))

    def clear_cache(self) -> None:
        self._cache = None
