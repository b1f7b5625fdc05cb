"""
Seed groups (and optionally sample votes) for development/demo.

Run with:
    python -m scripts.seed_groups
    python -m scripts.seed_groups --with-votes
    python -m scripts.seed_groups --clear
"""

import argparse
from functools import partial

from core.context import AppContext
from core.errors import DuplicateVoteError
from scripts._common import run_with_context

SEED_GROUPS = [
    "Drama Club",
    "Choir",
    "Dance Team",
    "Rock Band",
    "Brass Band",
]

# (group index, score) per sample device
SAMPLE_BALLOTS = [
    [(0, 5), (1, 4), (2, 3)],
    [(0, 4), (1, 5), (3, 4)],
    [(0, 5), (2, 4), (4, 5)],
    [(1, 4), (3, 3), (4, 4)],
    [(0, 4), (2, 5), (4, 3)],
]


async def seed(context: AppContext, with_votes: bool, clear: bool) -> int:
    if clear:
        deleted = await context.vote_service.delete_all_votes()
        print(f"Deleted {deleted} votes")
        for group in await context.group_service.get_all_groups():
            await context.group_service.delete_group(group.id)
            print(f"  Deleted group: {group.name}")

    existing = {g.name for g in await context.group_service.get_all_groups()}
    groups = []
    for name in SEED_GROUPS:
        if name in existing:
            print(f"  Group exists, skipping: {name}")
            continue
        group = await context.group_service.add_group(name)
        groups.append(group)
        print(f"  Added group: {group.name} (order {group.order})")

    if with_votes and groups:
        cast = 0
        for device_number, ballot in enumerate(SAMPLE_BALLOTS, start=1):
            device_id = f"device-seed{device_number:03d}"
            for index, score in ballot:
                if index >= len(groups):
                    continue
                try:
                    await context.vote_service.submit_vote(groups[index].id, score, device_id)
                    cast += 1
                except DuplicateVoteError:
                    pass
        print(f"Cast {cast} sample votes")

        result = await context.batch_processor.process_batch_aggregation()
        print(f"Aggregated {result.processed_groups or 0} groups")

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed LiveVote groups")
    parser.add_argument("--with-votes", action="store_true", help="Also cast sample votes")
    parser.add_argument("--clear", action="store_true", help="Delete all votes and groups first")
    args = parser.parse_args()

    run_with_context(partial(seed, with_votes=args.with_votes, clear=args.clear))
