"""
Application context.

The composition root: one AppContext per process holds the services and the
long-lived stateful components (batch processor, scheduler). It is built at
startup, stored on ``app.state.context`` and torn down at shutdown. Tests
build their own context around in-memory repositories.
"""

from dataclasses import dataclass

from core.config import settings
from repositories.provider import (
    ConfigRepositoryProtocol,
    GroupRepositoryProtocol,
    ResultRepositoryProtocol,
    VoteRepositoryProtocol,
    get_config_repository,
    get_group_repository,
    get_result_repository,
    get_vote_repository,
)
from services.admin_service import AdminService
from services.aggregation_scheduler import AggregationScheduler
from services.aggregation_service import AggregationService
from services.batch_processor import BatchProcessor
from services.config_service import ConfigService
from services.group_service import GroupService
from services.result_service import ResultService
from services.vote_service import VoteService


@dataclass
class AppContext:
    config_service: ConfigService
    group_service: GroupService
    vote_service: VoteService
    result_service: ResultService
    aggregation_service: AggregationService
    batch_processor: BatchProcessor
    scheduler: AggregationScheduler
    admin_service: AdminService


def build_context(
    group_repo: GroupRepositoryProtocol,
    vote_repo: VoteRepositoryProtocol,
    result_repo: ResultRepositoryProtocol,
    config_repo: ConfigRepositoryProtocol,
    batch_history_limit: int | None = None,
    scheduler_history_limit: int | None = None,
) -> AppContext:
    """Wire services around the given repositories."""
    config_service = ConfigService(config_repo)
    group_service = GroupService(group_repo, vote_repo)
    vote_service = VoteService(vote_repo, group_repo, config_repo)
    result_service = ResultService(result_repo)
    aggregation_service = AggregationService(group_repo, vote_repo, result_service)
    batch_processor = BatchProcessor(
        aggregation_service,
        result_service,
        config_service,
        history_limit=batch_history_limit or settings.BATCH_HISTORY_LIMIT,
    )
    scheduler = AggregationScheduler(
        batch_processor,
        history_limit=scheduler_history_limit or settings.SCHEDULER_HISTORY_LIMIT,
    )
    return AppContext(
        config_service=config_service,
        group_service=group_service,
        vote_service=vote_service,
        result_service=result_service,
        aggregation_service=aggregation_service,
        batch_processor=batch_processor,
        scheduler=scheduler,
        admin_service=AdminService(vote_service, group_service, config_service),
    )


def create_cosmos_context() -> AppContext:
    """Build the production context backed by Cosmos DB."""
    return build_context(
        group_repo=get_group_repository(),
        vote_repo=get_vote_repository(),
        result_repo=get_result_repository(),
        config_repo=get_config_repository(),
    )
