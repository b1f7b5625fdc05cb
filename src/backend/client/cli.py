"""
Command-line voting client.

Usage:
    livevote-client groups
    livevote-client vote <group_id> <score>
    livevote-client results
    livevote-client whoami
"""

import argparse
import asyncio
import sys
from typing import Optional

from client.api_client import VotingClient
from client.storage import FileStorage
from core.config import settings
from core.errors import LiveVoteError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livevote-client", description="LiveVote voting client")
    parser.add_argument("--api-url", default=settings.API_BASE_URL, help="API base URL")
    parser.add_argument(
        "--storage",
        default=settings.CLIENT_STORAGE_PATH,
        help="Local storage file for the device id and vote history",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("groups", help="List groups")

    vote = subparsers.add_parser("vote", help="Cast a vote")
    vote.add_argument("group_id")
    vote.add_argument("score", type=int, help="Score from 1 to 5")

    subparsers.add_parser("results", help="Show ranked results")
    subparsers.add_parser("whoami", help="Show this device's id and local vote history")
    return parser


async def run(args: argparse.Namespace) -> int:
    storage = FileStorage(args.storage)

    async with VotingClient(args.api_url, storage) as client:
        if args.command == "whoami":
            print(client.device_id)
            for record in client.history.get_history():
                print(f"  voted for {record.group_id} at {record.voted_at}")
            return 0

        if args.command == "groups":
            for group in await client.list_groups():
                print(f"{group['order']:>3}  {group['id']}  {group['name']}")
            return 0

        if args.command == "vote":
            vote = await client.submit_vote(args.group_id, args.score)
            print(f"Voted {vote['score']} for {vote['group_name']}")
            return 0

        if args.command == "results":
            payload = await client.get_results()
            for result in payload["results"]:
                print(
                    f"#{result['rank']:<3} {result['group_name']:<30} "
                    f"avg {result['average_score']:.2f}  ({result['vote_count']} votes)"
                )
            if payload.get("last_updated"):
                print(f"Last updated: {payload['last_updated']}")
            return 0

    return 2


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except LiveVoteError as e:
        hint = " (please try again)" if e.retryable else ""
        print(f"Error: {e.message}{hint}", file=sys.stderr)
        for detail in e.errors[1:]:
            print(f"  - {detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
