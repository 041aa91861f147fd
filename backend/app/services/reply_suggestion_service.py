"""LLM-drafted replies to triaged comments."""
import json
import logging
import uuid

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import transaction
from app.integrations.ai.comment_scorer import CompletionDelegate, strip_code_fence
from app.models.comment import ReplyTone
from app.models.suggested_reply import SuggestedReply
from app.repositories import comment_repository
from app.utils.errors import ExternalServiceError, NotFoundError
from app.utils.helpers import clamp, truncate, utc_now

logger = logging.getLogger(__name__)

_REPLY_PROMPT = """Write a {tone} reply to this social media comment. Return ONLY a JSON with this structure:

{{
  "suggested_reply": "Your reply here",
  "confidence_score": 0.85,
  "alternative_replies": ["Alternative 1", "Alternative 2"]
}}

CONTEXT:
Original post: "{post}"
Comment: "{comment}"
Author: {author}
Platform: {platform}
Requested tone: {tone}
{extra}
RULES:
- Be {tone} but authentic
- At most 280 characters for LinkedIn/Twitter
- Answer the comment directly, in the comment's language
- Be helpful and engaging
- Do not invent information

Return ONLY the JSON, nothing else."""


class _ReplyDraft(BaseModel):
    suggested_reply: str = Field(min_length=1)
    confidence_score: float = 0.5
    alternative_replies: list[str] = []


class ReplySuggestionService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], llm: CompletionDelegate):
        self.session_factory = session_factory
        self.llm = llm

    async def suggest_reply(
        self, comment_id: uuid.UUID, tone: ReplyTone | None = None, context: str | None = None
    ) -> SuggestedReply:
        async with transaction(self.session_factory) as db:
            comment = await comment_repository.get_by_id(db, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)

        if tone is None:
            suggested = (comment.ai_analysis_metadata or {}).get("suggested_tone")
            tone = ReplyTone(suggested) if suggested in ReplyTone._value2member_map_ else ReplyTone.PROFESSIONAL

        prompt = _REPLY_PROMPT.format(
            tone=tone.value,
            post=truncate(comment.post_content or "N/A", 500),
            comment=comment.content,
            author=comment.author_name or "User",
            platform=comment.platform.value,
            extra=f"Additional context: {context}\n" if context else "",
        )
        try:
            raw = await self.llm.complete(prompt)
            draft = _ReplyDraft.model_validate(json.loads(strip_code_fence(raw)))
        except ExternalServiceError:
            raise
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ExternalServiceError("llm", f"unusable reply suggestion: {exc}") from exc
        except Exception as exc:
            logger.error("Reply suggestion failed for comment %s: %s", comment_id, exc)
            raise ExternalServiceError("llm", str(exc)) from exc

        suggestion = SuggestedReply(
            comment_id=comment_id,
            suggested_reply=draft.suggested_reply,
            tone=tone,
            confidence_score=clamp(draft.confidence_score, 0.0, 1.0),
            alternative_replies=draft.alternative_replies,
            generated_at=utc_now(),
        )
        async with transaction(self.session_factory) as db:
            db.add(suggestion)
        return suggestion
