"""Tests for Easy Reply swipe sessions, statistics and reply suggestions."""
import json
import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.models.comment import AIPriority, Comment, CommentCategory, CommentStatus, ReplyTone
from app.models.swipe import CommentSwipe, SwipeAction, SwipeSession
from app.services import swipe_service
from app.services.swipe_service import SwipeService
from app.utils.errors import NotFoundError, StorageError
from app.utils.helpers import utc_now
from tests.conftest import create_comment

pytestmark = pytest.mark.anyio


async def _fetch(session_factory, model, key):
    async with session_factory() as db:
        return await db.get(model, key)


# ── Service ──


class TestSwipeService:
    async def test_start_session_defaults(self, session_factory):
        session = await SwipeService(session_factory).start_session("ws-1", "user-1")
        assert session.id is not None
        assert session.comments_reviewed == 0
        assert session.comments_replied == 0
        assert session.session_ended_at is None
        assert session.session_metadata == {"started_from": "web_app"}

    async def test_swipe_right_with_reply(self, session_factory, db_session):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        swipe = await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_RIGHT, "Happy to help!")
        assert swipe.reply_sent is True

        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == CommentStatus.REVIEWED
        assert stored.is_replied_by_us is True
        assert stored.reply_content == "Happy to help!"
        assert stored.replied_at is not None
        assert stored.reviewed_by == "user-1"
        assert stored.reviewed_at is not None

    async def test_swipe_right_without_reply_is_not_a_reply(self, session_factory, db_session):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        swipe = await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_RIGHT)
        assert swipe.reply_sent is False
        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == CommentStatus.REVIEWED
        assert stored.is_replied_by_us is False

    @pytest.mark.parametrize("action, status", [
        (SwipeAction.SWIPE_LEFT, CommentStatus.IGNORED),
        (SwipeAction.SWIPE_UP, CommentStatus.ARCHIVED),
    ])
    async def test_swipe_left_and_up(self, session_factory, db_session, action, status):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        swipe = await service.record_swipe(session.id, comment.id, action, "ignored text")
        assert swipe.reply_sent is False
        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == status
        assert stored.is_replied_by_us is False

    async def test_comment_can_be_swiped_again(self, session_factory, db_session):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_LEFT)
        await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_UP)

        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == CommentStatus.ARCHIVED

    async def test_swipe_left_after_reply_clears_reply_flag(self, session_factory, db_session):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_RIGHT, "Happy to help!")
        await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_LEFT)

        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == CommentStatus.IGNORED
        assert stored.is_replied_by_us is False

    async def test_unknown_session_or_comment(self, session_factory, db_session):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        with pytest.raises(NotFoundError):
            await service.record_swipe(uuid.uuid4(), comment.id, SwipeAction.SWIPE_LEFT)
        with pytest.raises(NotFoundError):
            await service.record_swipe(session.id, uuid.uuid4(), SwipeAction.SWIPE_LEFT)
        with pytest.raises(NotFoundError):
            await service.end_session(uuid.uuid4())

    async def test_end_session_counts_swipes(self, session_factory, db_session):
        first = await create_comment(db_session)
        second = await create_comment(db_session)
        third = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        await service.record_swipe(session.id, first.id, SwipeAction.SWIPE_RIGHT, "Thanks!")
        await service.record_swipe(session.id, second.id, SwipeAction.SWIPE_LEFT)
        await service.record_swipe(session.id, third.id, SwipeAction.SWIPE_UP)

        ended = await service.end_session(session.id)
        assert ended.comments_reviewed == 3
        assert ended.comments_replied == 1
        assert ended.session_ended_at is not None

        # Ending again recounts, including swipes recorded after the first end
        await service.record_swipe(session.id, second.id, SwipeAction.SWIPE_RIGHT, "Sorry about that")
        ended = await service.end_session(session.id)
        assert ended.comments_reviewed == 4
        assert ended.comments_replied == 2

    async def test_end_session_twice_keeps_counters(self, session_factory, db_session, monkeypatch):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")
        await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_RIGHT, "Thanks!")

        first_end = utc_now()
        monkeypatch.setattr(swipe_service, "utc_now", lambda: first_end)
        ended = await service.end_session(session.id)
        assert (ended.comments_reviewed, ended.comments_replied) == (1, 1)
        assert ended.session_ended_at == first_end

        monkeypatch.setattr(swipe_service, "utc_now", lambda: first_end + timedelta(minutes=5))
        ended = await service.end_session(session.id)
        assert (ended.comments_reviewed, ended.comments_replied) == (1, 1)
        assert ended.session_ended_at == first_end + timedelta(minutes=5)

    async def test_failed_comment_update_discards_swipe(self, session_factory, db_session, monkeypatch):
        comment = await create_comment(db_session)
        service = SwipeService(session_factory)
        session = await service.start_session("ws-1", "user-1")

        async def locked(*args, **kwargs):
            raise OperationalError("UPDATE comments", {}, Exception("database is locked"))

        monkeypatch.setattr(swipe_service.comment_repository, "set_triage", locked)
        with pytest.raises(StorageError):
            await service.record_swipe(session.id, comment.id, SwipeAction.SWIPE_RIGHT, "Thanks!")

        async with session_factory() as db:
            swipes = (await db.execute(select(CommentSwipe))).scalars().all()
        assert swipes == []
        stored = await _fetch(session_factory, Comment, comment.id)
        assert stored.status == CommentStatus.PENDING
        assert stored.is_replied_by_us is False

    async def test_easy_reply_stats(self, session_factory, db_session):
        await create_comment(
            db_session, ai_score=80, ai_category=CommentCategory.QUESTION, ai_priority=AIPriority.HIGH,
            ai_analyzed_at=utc_now(), is_replied_by_us=True,
        )
        await create_comment(
            db_session, ai_score=40, ai_category=CommentCategory.QUESTION, ai_priority=AIPriority.LOW,
            ai_analyzed_at=utc_now(),
        )
        await create_comment(
            db_session, ai_score=60, ai_category=CommentCategory.COMPLIMENT, ai_priority=AIPriority.MEDIUM,
            ai_analyzed_at=utc_now(),
        )
        await create_comment(db_session)
        await create_comment(db_session, workspace_id="ws-other", ai_score=100)

        db_session.add(SwipeSession(
            workspace_id="ws-1", user_id="u", session_started_at=utc_now() - timedelta(days=1),
            comments_reviewed=4, comments_replied=2,
        ))
        db_session.add(SwipeSession(
            workspace_id="ws-1", user_id="u", session_started_at=utc_now() - timedelta(days=2),
            comments_reviewed=2, comments_replied=0,
        ))
        db_session.add(SwipeSession(
            workspace_id="ws-1", user_id="u", session_started_at=utc_now() - timedelta(days=90),
            comments_reviewed=50, comments_replied=50,
        ))
        await db_session.commit()

        stats = await SwipeService(session_factory).get_easy_reply_stats("ws-1", period_days=30)

        assert stats.period_days == 30
        assert stats.global_stats.total_comments == 4
        assert stats.global_stats.analyzed_comments == 3
        assert stats.global_stats.replied_comments == 1
        assert stats.global_stats.avg_ai_score == 60.0
        assert stats.global_stats.high_priority_comments == 1

        breakdown = {c.category: (c.count, c.replied_count) for c in stats.category_breakdown}
        assert breakdown == {"question": (2, 1), "compliment": (1, 0)}
        assert stats.category_breakdown[0].category == "question"

        assert stats.session_stats.total_sessions == 2
        assert stats.session_stats.avg_reviewed_per_session == 3.0
        assert stats.session_stats.avg_replied_per_session == 1.0
        assert stats.session_stats.total_replies_sent == 2

    async def test_stats_for_empty_workspace(self, session_factory):
        stats = await SwipeService(session_factory).get_easy_reply_stats("ws-empty")
        assert stats.global_stats.total_comments == 0
        assert stats.global_stats.avg_ai_score is None
        assert stats.category_breakdown == []
        assert stats.session_stats.total_sessions == 0


# ── API ──


class TestEasyReplyAPI:
    async def test_session_lifecycle(self, client: AsyncClient, db_session):
        comment = await create_comment(db_session)

        resp = await client.post("/api/v1/easy-reply/session/start", json={
            "workspace_id": "ws-1", "user_id": "user-7", "metadata": {"started_from": "mobile"},
        })
        assert resp.status_code == 201
        session = resp.json()["data"]
        assert session["session_metadata"] == {"started_from": "mobile"}

        resp = await client.post("/api/v1/easy-reply/swipe", json={
            "session_id": session["id"],
            "comment_id": str(comment.id),
            "action": "swipe_right",
            "reply_content": "Check the security settings page.",
        })
        assert resp.status_code == 201
        assert resp.json()["data"]["reply_sent"] is True

        resp = await client.put(f"/api/v1/easy-reply/session/{session['id']}/end")
        assert resp.status_code == 200
        ended = resp.json()["data"]
        assert ended["comments_reviewed"] == 1
        assert ended["comments_replied"] == 1
        assert ended["session_ended_at"] is not None

    async def test_swipe_invalid_action(self, client: AsyncClient):
        resp = await client.post("/api/v1/easy-reply/swipe", json={
            "session_id": str(uuid.uuid4()), "comment_id": str(uuid.uuid4()), "action": "swipe_down",
        })
        assert resp.status_code == 422

    async def test_swipe_unknown_session(self, client: AsyncClient, db_session):
        comment = await create_comment(db_session)
        resp = await client.post("/api/v1/easy-reply/swipe", json={
            "session_id": str(uuid.uuid4()), "comment_id": str(comment.id), "action": "swipe_left",
        })
        assert resp.status_code == 404

    async def test_stats_endpoint(self, client: AsyncClient, db_session):
        await create_comment(db_session, ai_score=70, ai_analyzed_at=utc_now())
        resp = await client.get("/api/v1/easy-reply/stats/ws-1", params={"period_days": 7})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["period_days"] == 7
        assert data["global_stats"]["total_comments"] == 1
        assert data["global_stats"]["avg_ai_score"] == 70.0

    async def test_stats_period_bounds(self, client: AsyncClient):
        resp = await client.get("/api/v1/easy-reply/stats/ws-1", params={"period_days": 0})
        assert resp.status_code == 422


# ── Reply suggestions ──


class TestSuggestReply:
    async def test_suggestion_uses_analysis_tone(self, client: AsyncClient, db_session, llm):
        comment = await create_comment(db_session, ai_analysis_metadata={"suggested_tone": "friendly"})
        llm.reply = json.dumps({
            "suggested_reply": "Hi Alice! Head to Settings > Security.",
            "confidence_score": 1.7,
            "alternative_replies": ["Settings > Security has it."],
        })

        resp = await client.post("/api/v1/easy-reply/suggest-reply", json={"comment_id": str(comment.id)})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["tone"] == ReplyTone.FRIENDLY.value
        assert data["suggested_reply"].startswith("Hi Alice")
        assert data["confidence_score"] == 1.0
        assert data["alternative_replies"] == ["Settings > Security has it."]
        assert "Requested tone: friendly" in llm.prompts[0]

    async def test_explicit_tone_and_context(self, client: AsyncClient, db_session, llm):
        comment = await create_comment(db_session)
        llm.reply = '```json\n{"suggested_reply": "Thank you for your question."}\n```'

        resp = await client.post("/api/v1/easy-reply/suggest-reply", json={
            "comment_id": str(comment.id), "tone": "formal", "context": "Feature ships next week",
        })
        assert resp.status_code == 200
        assert resp.json()["data"]["tone"] == "formal"
        assert resp.json()["data"]["confidence_score"] == 0.5
        assert "Additional context: Feature ships next week" in llm.prompts[0]

    async def test_unusable_suggestion(self, client: AsyncClient, db_session, llm):
        comment = await create_comment(db_session)
        llm.reply = "I'd reply with something nice."
        resp = await client.post("/api/v1/easy-reply/suggest-reply", json={"comment_id": str(comment.id)})
        assert resp.status_code == 502
        assert resp.json()["type"] == "external_service_failure"

    async def test_llm_failure(self, client: AsyncClient, db_session, llm):
        comment = await create_comment(db_session)
        llm.error = RuntimeError("rate limited")
        resp = await client.post("/api/v1/easy-reply/suggest-reply", json={"comment_id": str(comment.id)})
        assert resp.status_code == 502

    async def test_unknown_comment(self, client: AsyncClient):
        resp = await client.post("/api/v1/easy-reply/suggest-reply", json={"comment_id": str(uuid.uuid4())})
        assert resp.status_code == 404
