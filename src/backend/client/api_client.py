"""
HTTP client for the LiveVote API.

Error responses are turned back into the same LiveVoteError subclasses the
server raised, using the ``code`` field of the body.
"""

from typing import Any, Optional

import httpx
import structlog

from client.device_identity import DeviceIdManager
from client.storage import KeyValueStorage
from client.vote_history import VoteHistoryManager
from core.errors import ERRORS_BY_CODE, DuplicateVoteError, LiveVoteError, StoreError

logger = structlog.get_logger(__name__)


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = {}

    error_cls = ERRORS_BY_CODE.get(body.get("code", ""))
    if error_cls is not None:
        raise error_cls(body.get("detail"), body.get("errors"))
    if response.status_code >= 500:
        raise StoreError(body.get("detail") or None)
    raise LiveVoteError(body.get("detail") or f"Request failed with status {response.status_code}")


class VotingClient:
    """
    Async client that casts votes as this device.

    Usage:
        async with VotingClient("http://localhost:8000", storage) as client:
            groups = await client.list_groups()
            await client.submit_vote(groups[0]["id"], 5)
    """

    def __init__(
        self,
        base_url: str,
        storage: KeyValueStorage,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.device = DeviceIdManager(storage)
        self.history = VoteHistoryManager(storage)
        self.http_client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "VotingClient":
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(base_url=self.base_url, timeout=30.0)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.http_client and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self.http_client is None:
            raise RuntimeError("VotingClient must be used as an async context manager")
        try:
            response = await self.http_client.request(method, f"/api/v1{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error("api_request_failed", path=path, error=str(e))
            raise StoreError("Could not reach the voting server") from e
        _raise_for_error(response)
        return response

    @property
    def device_id(self) -> str:
        return self.device.get_device_id()

    async def list_groups(self) -> list[dict[str, Any]]:
        response = await self._request("GET", "/groups")
        return response.json()

    async def get_results(self) -> dict[str, Any]:
        response = await self._request("GET", "/results")
        return response.json()

    async def get_config(self) -> dict[str, Any]:
        response = await self._request("GET", "/config")
        return response.json()

    async def has_voted(self, group_id: str) -> bool:
        """Ask the server, which is authoritative."""
        response = await self._request(
            "GET",
            "/votes/status",
            params={"group_id": group_id, "device_id": self.device_id},
        )
        return bool(response.json()["has_voted"])

    async def submit_vote(self, group_id: str, score: int) -> dict[str, Any]:
        """
        Cast a vote as this device.

        The local history is checked first so a known duplicate never hits
        the network. A server-side duplicate is recorded locally so the next
        attempt short-circuits.

        Raises:
            DuplicateVoteError: Already voted (locally known or server-reported).
            LocalStorageError: The vote was accepted but could not be recorded.
        """
        if self.history.has_voted(group_id):
            raise DuplicateVoteError()

        try:
            response = await self._request(
                "POST",
                "/votes",
                json={"group_id": group_id, "score": score, "device_id": self.device_id},
            )
        except DuplicateVoteError:
            if not self.history.has_voted(group_id):
                self.history.record_vote(group_id)
            raise

        self.history.record_vote(group_id)
        logger.info("vote_submitted", group_id=group_id, score=score)
        return response.json()["vote"]
