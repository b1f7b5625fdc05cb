"""Document models module."""

from models.documents import ConfigDocument, GroupDocument, ResultDocument, VoteDocument

__all__ = [
    "GroupDocument",
    "VoteDocument",
    "ResultDocument",
    "ConfigDocument",
]
