"""Easy Reply API - 5 endpoints."""
import uuid

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_reply_suggestion_service, get_swipe_service
from app.schemas.common import APIResponse
from app.schemas.easy_reply import (
    CommentSwipeResponse,
    SessionStartRequest,
    SuggestedReplyResponse,
    SuggestReplyRequest,
    SwipeRequest,
    SwipeSessionResponse,
)
from app.services.reply_suggestion_service import ReplySuggestionService
from app.services.swipe_service import SwipeService

router = APIRouter()


# POST /easy-reply/session/start
@router.post("/session/start", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    body: SessionStartRequest,
    service: SwipeService = Depends(get_swipe_service),
):
    session = await service.start_session(
        body.workspace_id, body.user_id, channel_id=body.channel_id, metadata=body.metadata,
    )
    return APIResponse(
        status="success",
        data=SwipeSessionResponse.model_validate(session).model_dump(),
        message="Swipe session started",
    )


# PUT /easy-reply/session/{id}/end
@router.put("/session/{session_id}/end", response_model=APIResponse)
async def end_session(
    session_id: uuid.UUID,
    service: SwipeService = Depends(get_swipe_service),
):
    session = await service.end_session(session_id)
    return APIResponse(
        status="success",
        data=SwipeSessionResponse.model_validate(session).model_dump(),
        message="Swipe session ended",
    )


# POST /easy-reply/swipe
@router.post("/swipe", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def record_swipe(
    body: SwipeRequest,
    service: SwipeService = Depends(get_swipe_service),
):
    swipe = await service.record_swipe(
        body.session_id, body.comment_id, body.action, reply_content=body.reply_content,
    )
    return APIResponse(
        status="success",
        data=CommentSwipeResponse.model_validate(swipe).model_dump(),
        message=f"Swipe {body.action.value} recorded",
    )


# GET /easy-reply/stats/{workspace_id}
@router.get("/stats/{workspace_id}", response_model=APIResponse)
async def get_stats(
    workspace_id: str,
    period_days: int = Query(30, ge=1, le=365),
    service: SwipeService = Depends(get_swipe_service),
):
    stats = await service.get_easy_reply_stats(workspace_id, period_days)
    return APIResponse(status="success", data=stats.model_dump())


# POST /easy-reply/suggest-reply
@router.post("/suggest-reply", response_model=APIResponse)
async def suggest_reply(
    body: SuggestReplyRequest,
    service: ReplySuggestionService = Depends(get_reply_suggestion_service),
):
    suggestion = await service.suggest_reply(body.comment_id, tone=body.tone, context=body.context)
    return APIResponse(
        status="success",
        data=SuggestedReplyResponse.model_validate(suggestion).model_dump(),
    )
