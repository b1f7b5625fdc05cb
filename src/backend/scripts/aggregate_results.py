"""
Rebuild the result cache from the votes currently stored.

Run with: python -m scripts.aggregate_results
"""

from core.context import AppContext
from scripts._common import run_with_context


async def aggregate(context: AppContext) -> int:
    print("Running batch aggregation...")
    result = await context.batch_processor.process_batch_aggregation()
    if not result.success:
        print(f"Aggregation failed: {result.error}")
        return 1

    print(f"Aggregated {result.processed_groups} groups in {result.processing_time:.0f} ms")
    for entry in await context.result_service.get_all_results():
        print(f"  #{entry.rank:<3} {entry.group_name:<30} {entry.average_score:.2f} ({entry.vote_count} votes)")
    return 0


if __name__ == "__main__":
    run_with_context(aggregate)
