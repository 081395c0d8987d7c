"""Persisted opportunity endpoints: list, dismiss, link task."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from crosssell.api.v1.dependencies import get_opportunity_service
from crosssell.core.exceptions import OpportunityNotFoundError, TaskAlreadyLinkedError
from crosssell.schemas.common import ApiResponse
from crosssell.schemas.opportunity import CrossSellSegment, OpportunityFilters, PriorityTier
from crosssell.schemas.tasks import TaskLinkRequest
from crosssell.services.opportunity_service import OpportunityService
from crosssell.utils.logging import get_logger
from crosssell.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


def _not_found(request: Request, opportunity_id: UUID) -> HTTPException:
    error_detail = create_error_detail(
        title="Opportunity Not Found",
        status=status.HTTP_404_NOT_FOUND,
        detail=f"Opportunity with ID {opportunity_id} not found",
        request=request,
    )
    return HTTPException(status_code=404, detail=error_detail.model_dump(mode="json"))


@router.get(
    "",
    response_model=ApiResponse,
    summary="List opportunities",
    operation_id="list_opportunities",
)
async def list_opportunities(
    request: Request,
    opportunity_service: Annotated[OpportunityService, Depends(get_opportunity_service)],
    agency_id: Optional[str] = Query(None),
    tier: Optional[PriorityTier] = Query(None),
    segment_type: Optional[CrossSellSegment] = Query(None),
    min_priority_score: Optional[int] = Query(None, ge=0, le=100),
    days_until_renewal_max: Optional[int] = Query(None, ge=0),
    dismissed: bool = Query(False),
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    """List persisted opportunities, highest priority first."""
    filters = OpportunityFilters(
        agency_id=agency_id,
        tier=tier,
        segment_type=segment_type,
        min_priority_score=min_priority_score,
        days_until_renewal_max=days_until_renewal_max,
        dismissed=dismissed,
        search=search,
    )
    result = await opportunity_service.list_opportunities(filters, limit=limit, offset=offset)

    return create_api_response(
        data=result,
        message="Opportunities retrieved successfully",
        request=request,
    )


@router.delete(
    "/{opportunity_id}",
    response_model=ApiResponse,
    summary="Dismiss an opportunity",
    operation_id="dismiss_opportunity",
)
async def dismiss_opportunity(
    request: Request,
    opportunity_service: Annotated[OpportunityService, Depends(get_opportunity_service)],
    opportunity_id: UUID,
    reason: Optional[str] = Query(None, max_length=500),
) -> ApiResponse:
    """Soft-delete an opportunity."""
    try:
        opportunity = await opportunity_service.dismiss(opportunity_id, reason)
    except OpportunityNotFoundError:
        raise _not_found(request, opportunity_id)

    return create_api_response(
        data=opportunity,
        message=f"Opportunity for {opportunity.customer_name} dismissed",
        request=request,
    )


@router.post(
    "/{opportunity_id}/task",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a task to an opportunity",
    operation_id="link_opportunity_task",
)
async def link_task(
    request: Request,
    opportunity_service: Annotated[OpportunityService, Depends(get_opportunity_service)],
    opportunity_id: UUID,
    payload: TaskLinkRequest,
) -> ApiResponse:
    """Link a task (at most once) and return the task draft."""
    try:
        draft = await opportunity_service.link_task(opportunity_id, payload.task_id, payload.text)
    except OpportunityNotFoundError:
        raise _not_found(request, opportunity_id)
    except TaskAlreadyLinkedError as e:
        error_detail = create_error_detail(
            title="Task Already Linked",
            status=status.HTTP_409_CONFLICT,
            detail=f"{e} (task {e.task_id})",
            request=request,
        )
        raise HTTPException(status_code=409, detail=error_detail.model_dump(mode="json"))

    return create_api_response(
        data=draft,
        message=f"Task created for {draft.customer_name}",
        request=request,
    )
