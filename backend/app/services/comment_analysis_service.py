"""Batch AI analysis of comments and the swipe queue."""
import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import transaction
from app.integrations.ai.comment_scorer import CommentScorer
from app.models.comment import Comment
from app.repositories import comment_repository
from app.schemas.comment import CommentAnalysis
from app.utils.errors import NotFoundError
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)

ANALYSIS_VERSION = "1.0"


class CommentAnalysisService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        scorer: CommentScorer,
        batch_limit: int = 100,
    ):
        self.session_factory = session_factory
        self.scorer = scorer
        self.batch_limit = batch_limit

    def _analysis_values(self, analysis: CommentAnalysis) -> dict:
        return {
            "ai_score": analysis.score,
            "ai_category": analysis.category,
            "ai_sentiment": analysis.sentiment,
            "ai_priority": analysis.priority,
            "ai_analysis_metadata": {
                "reasoning": analysis.reasoning,
                "suggested_tone": analysis.suggested_tone.value,
                "ai_model": self.scorer.model_name,
                "analysis_version": ANALYSIS_VERSION,
                "fallback": analysis.fallback,
            },
            "ai_analyzed_at": utc_now(),
        }

    async def analyze_and_save_comments(self, comments: Sequence[Comment]) -> list[CommentAnalysis]:
        """Score every comment, then persist all results in one transaction.

        Scoring never fails (the scorer falls back to its heuristic); a comment
        that no longer exists aborts and rolls back the whole batch.
        """
        analyses = [await self.scorer.score(comment) for comment in comments]
        async with transaction(self.session_factory) as db:
            for comment, analysis in zip(comments, analyses):
                if not await comment_repository.set_analysis(db, comment.id, self._analysis_values(analysis)):
                    raise NotFoundError("Comment", comment.id)
        fallbacks = sum(1 for a in analyses if a.fallback)
        logger.info("Analyzed %d comments (%d by fallback heuristic)", len(analyses), fallbacks)
        return analyses

    async def analyze_workspace_comments(
        self,
        workspace_id: str,
        channel_id: str | None = None,
        post_id: str | None = None,
        force_reanalysis: bool = False,
    ) -> int:
        async with transaction(self.session_factory) as db:
            comments = await comment_repository.list_for_analysis(
                db,
                workspace_id=workspace_id,
                channel_id=channel_id,
                post_id=post_id,
                include_analyzed=force_reanalysis,
                limit=self.batch_limit,
            )
        if not comments:
            return 0
        await self.analyze_and_save_comments(comments)
        return len(comments)

    async def get_comments_for_swipe(
        self,
        workspace_id: str,
        channel_id: str | None = None,
        limit: int = 20,
        min_score: int = 50,
        exclude_replied: bool = True,
    ) -> list[Comment]:
        async with transaction(self.session_factory) as db:
            return await comment_repository.swipe_queue(
                db,
                workspace_id=workspace_id,
                channel_id=channel_id,
                min_score=min_score,
                exclude_replied=exclude_replied,
                limit=limit,
            )
