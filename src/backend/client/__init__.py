"""Client-side library: device identity, local vote history and the API client."""

from client.api_client import VotingClient
from client.device_identity import DeviceIdManager
from client.storage import FileStorage
from client.vote_history import VoteHistoryManager, VoteRecord

__all__ = [
    "DeviceIdManager",
    "FileStorage",
    "VoteHistoryManager",
    "VoteRecord",
    "VotingClient",
]
