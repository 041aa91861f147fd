"""AI tasks: HIGH queue.

Batch reply-worthiness analysis of comments that have not been scored yet.
"""
import asyncio
import logging

from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


async def run_comment_analysis(
    workspace_id: str,
    channel_id: str | None = None,
    post_id: str | None = None,
    force_reanalysis: bool = False,
) -> int:
    """Analyze one batch of a workspace's comments on a task-owned engine."""
    from app.config import settings
    from app.database import create_engine, create_session_factory
    from app.integrations.ai.llm_client import LLMClient
    from app.integrations.ai.comment_scorer import build_comment_scorer
    from app.services.comment_analysis_service import CommentAnalysisService

    engine = create_engine(settings)
    try:
        service = CommentAnalysisService(
            create_session_factory(engine),
            build_comment_scorer(settings, LLMClient(settings)),
            batch_limit=settings.ANALYSIS_BATCH_LIMIT,
        )
        return await service.analyze_workspace_comments(
            workspace_id, channel_id=channel_id, post_id=post_id, force_reanalysis=force_reanalysis,
        )
    finally:
        await engine.dispose()


@celery_app.task(name="app.tasks.ai_tasks.analyze_comments")
def analyze_comments(
    workspace_id: str,
    channel_id: str | None = None,
    post_id: str | None = None,
    force_reanalysis: bool = False,
) -> int:
    """Score up to ANALYSIS_BATCH_LIMIT comments of a workspace.

    Returns the number of comments analyzed.
    """
    count = asyncio.run(run_comment_analysis(workspace_id, channel_id, post_id, force_reanalysis))
    logger.info("Analyzed %d comments for workspace %s", count, workspace_id)
    return count
