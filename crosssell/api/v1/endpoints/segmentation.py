"""Customer value segmentation endpoints."""

from fastapi import APIRouter, Request

from crosssell.schemas.common import ApiResponse
from crosssell.schemas.segmentation import (
    SegmentClassificationRequest,
    SegmentClassificationResponse,
)
from crosssell.services.scoring.configs.scoring import PRIORITY_TIER_THRESHOLDS
from crosssell.services.segmentation.customer_segmentation import (
    SEGMENT_CONFIGS,
    SEGMENT_THRESHOLDS,
    calculate_segment_ltv,
    get_customer_segment_with_config,
)
from crosssell.utils.responses import create_api_response

router = APIRouter()


@router.post(
    "/classify",
    response_model=ApiResponse,
    summary="Classify a customer's value tier",
    operation_id="classify_customer_segment",
)
async def classify_segment(
    request: Request,
    payload: SegmentClassificationRequest,
) -> ApiResponse:
    tier, config = get_customer_segment_with_config(payload.total_premium, payload.policy_count)
    result = SegmentClassificationResponse(
        tier=tier,
        config=config,
        estimated_ltv=round(calculate_segment_ltv(payload.total_premium, payload.policy_count), 2),
    )
    return create_api_response(
        data=result,
        message=f"Customer classified as {tier.value}",
        request=request,
    )


@router.get(
    "/tiers",
    response_model=ApiResponse,
    summary="List segment tiers and thresholds",
    operation_id="list_segment_tiers",
)
async def list_tiers(request: Request) -> ApiResponse:
    return create_api_response(
        data={
            "tiers": [config.model_dump(mode="json") for config in SEGMENT_CONFIGS.values()],
            "thresholds": SEGMENT_THRESHOLDS,
            "priority_tiers": {tier: threshold for tier, threshold in PRIORITY_TIER_THRESHOLDS},
        },
        message="Segment tiers retrieved successfully",
        request=request,
    )
