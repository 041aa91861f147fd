"""FastAPI dependency injection utilities.

Long-lived collaborators are built by the application lifespan and kept on
``app.state``; the dependencies below hand out request-scoped services on top
of them.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import Settings
from app.integrations.ai.comment_scorer import CommentScorer
from app.integrations.ai.llm_client import LLMClient
from app.integrations.networks.registry import NetworkRegistry
from app.services.collection_service import CollectionService
from app.services.comment_analysis_service import CommentAnalysisService
from app.services.comment_service import CommentService
from app.services.metrics_service import MetricsService
from app.services.reply_suggestion_service import ReplySuggestionService
from app.services.swipe_service import SwipeService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_comment_scorer(request: Request) -> CommentScorer:
    return request.app.state.comment_scorer


def get_network_registry(request: Request) -> NetworkRegistry:
    return request.app.state.network_registry


def get_comment_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CommentService:
    return CommentService(session_factory)


def get_comment_analysis_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    scorer: CommentScorer = Depends(get_comment_scorer),
    settings: Settings = Depends(get_settings),
) -> CommentAnalysisService:
    return CommentAnalysisService(session_factory, scorer, batch_limit=settings.ANALYSIS_BATCH_LIMIT)


def get_swipe_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SwipeService:
    return SwipeService(session_factory)


def get_reply_suggestion_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    llm: LLMClient = Depends(get_llm_client),
) -> ReplySuggestionService:
    return ReplySuggestionService(session_factory, llm)


def get_metrics_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> MetricsService:
    return MetricsService(session_factory)


def get_collection_service(
    registry: NetworkRegistry = Depends(get_network_registry),
    metrics: MetricsService = Depends(get_metrics_service),
) -> CollectionService:
    return CollectionService(registry, metrics)
