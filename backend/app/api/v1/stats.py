"""Statistics API - 8 endpoints."""
from fastapi import APIRouter, Depends, status

from app.dependencies import get_collection_service, get_metrics_service, get_network_registry
from app.integrations.networks.registry import NetworkRegistry
from app.schemas.common import APIResponse
from app.schemas.stats import (
    AccountCollectRequest,
    CollectionCheckRequest,
    CollectionDecisionResponse,
    CollectRequest,
    CollectResult,
    MetricSampleResponse,
    MetricSamplesRequest,
    NetworkDescription,
    StatsQuery,
    StatsRequest,
)
from app.services.collection_service import CollectionService
from app.services.metrics_service import MetricsService

router = APIRouter()


def _decision_payload(decision) -> CollectionDecisionResponse:
    return CollectionDecisionResponse(
        should_collect=decision.should_collect,
        metrics_to_collect=decision.metrics_to_collect,
        next_collection_at=decision.next_collection_at,
    )


# POST /stats/metrics
@router.post("/metrics", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
async def save_metrics(
    body: MetricSamplesRequest,
    service: MetricsService = Depends(get_metrics_service),
):
    saved = await service.save_metrics(body.metrics)
    return APIResponse(status="success", data={"saved_count": saved}, message=f"{saved} metrics saved")


# POST /stats/workspace/{workspace_id}
@router.post("/workspace/{workspace_id}", response_model=APIResponse)
async def get_workspace_stats(
    workspace_id: str,
    body: StatsQuery,
    service: MetricsService = Depends(get_metrics_service),
):
    request = StatsRequest(workspace_id=workspace_id, **body.model_dump())
    stats = await service.get_stats(request)
    return APIResponse(status="success", data=stats.model_dump(mode="json"))


# POST /stats/workspace/{workspace_id}/channel/{channel_id}
@router.post("/workspace/{workspace_id}/channel/{channel_id}", response_model=APIResponse)
async def get_channel_stats(
    workspace_id: str,
    channel_id: str,
    body: StatsQuery,
    service: MetricsService = Depends(get_metrics_service),
):
    request = StatsRequest(
        workspace_id=workspace_id, **body.model_dump(exclude={"channel_ids"}), channel_ids=[channel_id],
    )
    stats = await service.get_stats(request)
    return APIResponse(status="success", data=stats.model_dump(mode="json"))


# GET /stats/workspace/{workspace_id}/channel/{channel_id}/post/{post_id}
@router.get("/workspace/{workspace_id}/channel/{channel_id}/post/{post_id}", response_model=APIResponse)
async def get_post_metrics(
    workspace_id: str,
    channel_id: str,
    post_id: str,
    service: MetricsService = Depends(get_metrics_service),
):
    grouped = await service.get_post_metrics(workspace_id, channel_id, post_id)
    return APIResponse(
        status="success",
        data={
            metric: [MetricSampleResponse.model_validate(s).model_dump() for s in samples]
            for metric, samples in grouped.items()
        },
    )


# POST /stats/collect/check
@router.post("/collect/check", response_model=APIResponse)
async def check_collection(
    body: CollectionCheckRequest,
    service: CollectionService = Depends(get_collection_service),
):
    decision = await service.check(
        body.channel, body.post_id, body.post_created_at, last_collection_at=body.last_collection_at,
    )
    return APIResponse(status="success", data=_decision_payload(decision).model_dump())


# POST /stats/collect
@router.post("/collect", response_model=APIResponse)
async def collect_post_metrics(
    body: CollectRequest,
    service: CollectionService = Depends(get_collection_service),
):
    outcome = await service.collect_post(body.channel, body.post_id, body.post_created_at)
    result = CollectResult(decision=_decision_payload(outcome.decision), saved_count=outcome.saved_count)
    return APIResponse(status="success", data=result.model_dump())


# POST /stats/collect/account
@router.post("/collect/account", response_model=APIResponse)
async def collect_account_metrics(
    body: AccountCollectRequest,
    service: CollectionService = Depends(get_collection_service),
):
    saved = await service.collect_account(body.channel)
    return APIResponse(status="success", data={"saved_count": saved}, message=f"{saved} account metrics saved")


# GET /stats/networks
@router.get("/networks", response_model=APIResponse)
async def list_networks(registry: NetworkRegistry = Depends(get_network_registry)):
    return APIResponse(
        status="success",
        data=[NetworkDescription(**entry).model_dump() for entry in registry.describe()],
    )
