"""Easy Reply swipe sessions.

Each swipe moves a comment to the status of its action (right: reviewed,
left: ignored, up: archived). Swiping an already triaged comment again simply
overwrites the previous outcome.
"""
import logging
import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import transaction
from app.models.swipe import SWIPE_STATUS, CommentSwipe, SwipeAction, SwipeSession
from app.repositories import comment_repository, swipe_repository
from app.schemas.easy_reply import CategoryBreakdown, EasyReplyStats, GlobalCommentStats, SessionStats
from app.utils.errors import NotFoundError
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)

DEFAULT_SESSION_METADATA = {"started_from": "web_app"}


class SwipeService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def start_session(
        self,
        workspace_id: str,
        user_id: str,
        channel_id: str | None = None,
        metadata: dict | None = None,
    ) -> SwipeSession:
        session = SwipeSession(
            workspace_id=workspace_id,
            channel_id=channel_id,
            user_id=user_id,
            session_started_at=utc_now(),
            comments_reviewed=0,
            comments_replied=0,
            session_metadata=metadata if metadata is not None else dict(DEFAULT_SESSION_METADATA),
        )
        async with transaction(self.session_factory) as db:
            await swipe_repository.create_session(db, session)
        logger.info("Swipe session %s started for user %s", session.id, user_id)
        return session

    async def record_swipe(
        self,
        session_id: uuid.UUID,
        comment_id: uuid.UUID,
        action: SwipeAction,
        reply_content: str | None = None,
    ) -> CommentSwipe:
        now = utc_now()
        reply_sent = action == SwipeAction.SWIPE_RIGHT and bool(reply_content)
        async with transaction(self.session_factory) as db:
            session = await swipe_repository.get_session(db, session_id)
            if session is None:
                raise NotFoundError("Swipe session", session_id)
            if not await swipe_repository.comment_exists(db, comment_id):
                raise NotFoundError("Comment", comment_id)

            swipe = await swipe_repository.create_swipe(
                db,
                CommentSwipe(
                    session_id=session_id,
                    comment_id=comment_id,
                    action=action,
                    reply_sent=reply_sent,
                    reply_content=reply_content,
                    swiped_at=now,
                ),
            )
            await comment_repository.set_triage(
                db,
                comment_id,
                {
                    "status": SWIPE_STATUS[action],
                    "is_replied_by_us": reply_sent,
                    "reply_content": reply_content,
                    "replied_at": now if reply_sent else None,
                    "reviewed_at": now,
                    "reviewed_by": session.user_id,
                },
            )
        return swipe

    async def end_session(self, session_id: uuid.UUID) -> SwipeSession:
        """Close a session, recounting its swipes on every call."""
        async with transaction(self.session_factory) as db:
            session = await swipe_repository.get_session(db, session_id)
            if session is None:
                raise NotFoundError("Swipe session", session_id)
            reviewed, replied = await swipe_repository.count_swipes(db, session_id)
            session.comments_reviewed = reviewed
            session.comments_replied = replied
            session.session_ended_at = utc_now()
            await db.flush()
        logger.info("Swipe session %s ended: %d reviewed, %d replied", session_id, reviewed, replied)
        return session

    async def get_easy_reply_stats(self, workspace_id: str, period_days: int = 30) -> EasyReplyStats:
        since = utc_now() - timedelta(days=period_days)
        async with transaction(self.session_factory) as db:
            comments = await swipe_repository.comment_totals(db, workspace_id, since)
            categories = await swipe_repository.category_breakdown(db, workspace_id, since)
            sessions = await swipe_repository.session_totals(db, workspace_id, since)
        return EasyReplyStats(
            period_days=period_days,
            global_stats=GlobalCommentStats(**comments),
            category_breakdown=[CategoryBreakdown(**c) for c in categories],
            session_stats=SessionStats(**sessions),
        )
