"""
Cosmos DB document models for LiveVote.

These Pydantic models define the document structure stored in Cosmos DB.

Container Strategy:
- groups: Groups being voted on (partition: /id)
- votes: Individual votes (partition: /group_id)
- results: Cached per-group aggregates, id == group_id (partition: /group_id)
- config: The single system settings document (partition: /id)
"""

import hashlib
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

CONFIG_DOCUMENT_ID = "system"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def vote_document_id(device_id: str, group_id: str) -> str:
    """
    Deterministic vote id for a (device, group) pair.

    Votes are partitioned by group, and ids are unique within a partition,
    so a second create for the same pair fails with a conflict.
    """
    digest = hashlib.sha256(f"{device_id}:{group_id}".encode()).hexdigest()
    return f"vote-{digest[:32]}"


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for Cosmos DB documents.

    System properties (_ts, _etag, ...) are stripped by the session helpers
    before documents are parsed.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid4()))


# ============================================================================
# Documents
# ============================================================================


class GroupDocument(CosmosDocument):
    """A team or entity that participants score."""

    name: str
    order: int = 0  # Display ordering only
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class VoteDocument(CosmosDocument):
    """
    One (device, group, score) submission.

    group_name is a snapshot taken when the vote was cast.
    """

    group_id: str
    group_name: str = ""
    score: int
    device_id: str
    created_at: datetime = Field(default_factory=utcnow)


class ResultDocument(CosmosDocument):
    """
    Cached aggregate and rank for one group.

    Derived entirely from votes and groups; safe to drop and regenerate.
    """

    group_id: str
    group_name: str
    total_score: int = 0
    vote_count: int = 0
    average_score: float = 0.0
    rank: int = 0
    updated_at: Optional[datetime] = None


class ConfigDocument(CosmosDocument):
    """System settings singleton."""

    id: str = CONFIG_DOCUMENT_ID
    voting_enabled: bool = True
    results_visible: bool = True
    update_interval: float = 60  # seconds
    aggregation_enabled: bool = True
    current_group: Optional[str] = None
    updated_at: Optional[datetime] = None
