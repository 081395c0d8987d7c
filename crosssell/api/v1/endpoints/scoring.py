"""Scoring API endpoints. Nothing scored here is persisted."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from crosssell.api.v1.dependencies import default_scoring_options, get_batch_scoring_service
from crosssell.core.config import settings
from crosssell.schemas.common import ApiResponse
from crosssell.schemas.scoring import BatchScoringRequest, EnhanceRequest
from crosssell.services.scoring.batch_scoring_service import BatchScoringService
from crosssell.utils.logging import get_logger
from crosssell.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/score",
    response_model=ApiResponse,
    summary="Score a batch of opportunity records",
    description="Classify, score, rank and paginate records, with statistics over the whole batch",
    operation_id="score_opportunity_batch",
)
async def score_batch(
    request: Request,
    payload: BatchScoringRequest,
    scoring_service: Annotated[BatchScoringService, Depends(get_batch_scoring_service)],
) -> ApiResponse:
    """Score a batch of records."""
    if len(payload.records) > settings.scoring.max_batch_size:
        error_detail = create_error_detail(
            title="Batch Too Large",
            status=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Batch has {len(payload.records)} records, "
                f"maximum is {settings.scoring.max_batch_size}"
            ),
            request=request,
        )
        raise HTTPException(status_code=400, detail=error_detail.model_dump(mode="json"))

    result = scoring_service.score_batch(
        payload.records,
        options=payload.options or default_scoring_options(),
        limit=payload.limit,
        offset=payload.offset,
        as_of=payload.as_of,
    )

    return create_api_response(
        data=result,
        message=f"Scored {result.total} opportunities",
        request=request,
    )


@router.post(
    "/enhance",
    response_model=ApiResponse,
    summary="Score a single opportunity record",
    operation_id="enhance_opportunity_score",
)
async def enhance_score(
    request: Request,
    payload: EnhanceRequest,
    scoring_service: Annotated[BatchScoringService, Depends(get_batch_scoring_service)],
) -> ApiResponse:
    """Score one record and return its enhanced result."""
    scored = scoring_service.score_record(
        payload.record,
        options=payload.options or default_scoring_options(),
        as_of=payload.as_of,
    )

    return create_api_response(
        data=scored,
        message=f"Scored {payload.record.customer_name}: {scored.result.tier.value}",
        request=request,
    )
