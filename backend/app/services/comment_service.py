"""Comment ingestion, retrieval and reply status."""
import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import transaction
from app.models.comment import Comment
from app.models.platform import Platform
from app.repositories import comment_repository
from app.schemas.comment import CommentIn, CommentSortBy
from app.utils.errors import NotFoundError
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_comments(self, comments: list[CommentIn]) -> int:
        """Upsert a batch; existing rows only get their engagement fields refreshed."""
        rows = [c.model_dump() for c in comments]
        async with transaction(self.session_factory) as db:
            saved = await comment_repository.upsert_many(db, rows)
        logger.info("Saved %d comments", saved)
        return saved

    async def get_post_comments(
        self,
        workspace_id: str,
        post_id: str,
        platform: Platform | None = None,
        limit: int = 50,
        offset: int = 0,
        sort_by: CommentSortBy = "created_at",
        filter_replied: bool | None = None,
    ) -> tuple[list[Comment], int]:
        async with transaction(self.session_factory) as db:
            return await comment_repository.list_comments(
                db,
                workspace_id=workspace_id,
                post_id=post_id,
                platform=platform,
                filter_replied=filter_replied,
                sort_by=sort_by,
                skip=offset,
                limit=limit,
            )

    async def get_account_comments(
        self,
        workspace_id: str,
        channel_id: str | None = None,
        platform: Platform | None = None,
        limit: int = 50,
        offset: int = 0,
        sort_by: CommentSortBy = "created_at",
        filter_replied: bool | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> tuple[list[Comment], int]:
        async with transaction(self.session_factory) as db:
            return await comment_repository.list_comments(
                db,
                workspace_id=workspace_id,
                channel_id=channel_id,
                platform=platform,
                filter_replied=filter_replied,
                date_from=date_from,
                date_to=date_to,
                sort_by=sort_by,
                skip=offset,
                limit=limit,
            )

    async def update_comment_reply_status(
        self,
        comment_id: uuid.UUID,
        is_replied_by_us: bool,
        reply_content: str | None = None,
        replied_at: datetime | None = None,
    ) -> Comment:
        async with transaction(self.session_factory) as db:
            comment = await comment_repository.set_reply_status(
                db,
                comment_id,
                is_replied_by_us=is_replied_by_us,
                reply_content=reply_content,
                replied_at=replied_at or utc_now(),
            )
            if comment is None:
                raise NotFoundError("Comment", comment_id)
            return comment
