"""Comments API - 6 endpoints."""
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from app.config import Settings
from app.dependencies import get_comment_analysis_service, get_comment_service, get_settings
from app.models.platform import Platform
from app.schemas.comment import (
    AnalyzeRequest,
    AnalyzeResult,
    CommentIngestRequest,
    CommentResponse,
    CommentSortBy,
    ReplyStatusUpdate,
)
from app.schemas.common import APIResponse, PaginationMeta
from app.services.comment_analysis_service import CommentAnalysisService
from app.services.comment_service import CommentService

router = APIRouter()


# POST /comments/ingest
@router.post("/ingest", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def ingest_comments(
    body: CommentIngestRequest,
    service: CommentService = Depends(get_comment_service),
):
    saved = await service.save_comments(body.comments)
    return APIResponse(status="success", data={"saved_count": saved}, message=f"{saved} comments saved")


# GET /comments/post/{workspace_id}/{post_id}
@router.get("/post/{workspace_id}/{post_id}", response_model=APIResponse)
async def get_post_comments(
    workspace_id: str,
    post_id: str,
    platform: Platform | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    sort_by: CommentSortBy = "created_at",
    filter_replied: bool | None = None,
    service: CommentService = Depends(get_comment_service),
):
    comments, total = await service.get_post_comments(
        workspace_id, post_id, platform=platform, limit=limit, offset=offset,
        sort_by=sort_by, filter_replied=filter_replied,
    )
    return APIResponse(
        status="success",
        data=[CommentResponse.model_validate(c).model_dump() for c in comments],
        pagination=PaginationMeta.build(total, limit, offset),
    )


# GET /comments/account/{workspace_id}
@router.get("/account/{workspace_id}", response_model=APIResponse)
async def get_account_comments(
    workspace_id: str,
    channel_id: str | None = None,
    platform: Platform | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    sort_by: CommentSortBy = "created_at",
    filter_replied: bool | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    service: CommentService = Depends(get_comment_service),
):
    comments, total = await service.get_account_comments(
        workspace_id, channel_id=channel_id, platform=platform, limit=limit, offset=offset,
        sort_by=sort_by, filter_replied=filter_replied, date_from=date_from, date_to=date_to,
    )
    return APIResponse(
        status="success",
        data=[CommentResponse.model_validate(c).model_dump() for c in comments],
        pagination=PaginationMeta.build(total, limit, offset),
    )


# POST /comments/analyze/{workspace_id}
@router.post("/analyze/{workspace_id}", response_model=APIResponse)
async def analyze_comments(
    workspace_id: str,
    body: AnalyzeRequest | None = None,
    service: CommentAnalysisService = Depends(get_comment_analysis_service),
):
    body = body or AnalyzeRequest()
    count = await service.analyze_workspace_comments(
        workspace_id,
        channel_id=body.channel_id,
        post_id=body.post_id,
        force_reanalysis=body.force_reanalysis,
    )
    return APIResponse(
        status="success",
        data=AnalyzeResult(analyzed_count=count).model_dump(),
        message=f"{count} comments analyzed",
    )


# GET /comments/swipe/{workspace_id}
@router.get("/swipe/{workspace_id}", response_model=APIResponse)
async def get_comments_for_swipe(
    workspace_id: str,
    channel_id: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    min_score: int | None = Query(None, ge=0, le=100),
    exclude_replied: bool = True,
    settings: Settings = Depends(get_settings),
    service: CommentAnalysisService = Depends(get_comment_analysis_service),
):
    comments = await service.get_comments_for_swipe(
        workspace_id,
        channel_id=channel_id,
        limit=limit,
        min_score=settings.SWIPE_DEFAULT_MIN_SCORE if min_score is None else min_score,
        exclude_replied=exclude_replied,
    )
    return APIResponse(
        status="success",
        data=[CommentResponse.model_validate(c).model_dump() for c in comments],
    )


# PUT /comments/reply/{comment_id}
@router.put("/reply/{comment_id}", response_model=APIResponse)
async def update_reply_status(
    comment_id: uuid.UUID,
    body: ReplyStatusUpdate,
    service: CommentService = Depends(get_comment_service),
):
    comment = await service.update_comment_reply_status(
        comment_id, is_replied_by_us=body.is_replied, reply_content=body.reply_content,
    )
    return APIResponse(
        status="success",
        data=CommentResponse.model_validate(comment).model_dump(),
        message="Reply status updated",
    )
