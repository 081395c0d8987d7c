"""Shared FastAPI dependencies for the v1 API."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crosssell.core.config import settings
from crosssell.core.database import get_async_session as get_session
from crosssell.repositories.opportunity_repository import (
    CustomerInsightRepository,
    OpportunityRepository,
)
from crosssell.schemas.scoring import ScoringOptions
from crosssell.services.matching.customer_matcher import CustomerMatcher
from crosssell.services.opportunity_service import OpportunityService
from crosssell.services.scoring.batch_scoring_service import BatchScoringService
from crosssell.services.upload_service import UploadService


def default_scoring_options() -> ScoringOptions:
    """Scoring options from settings, used when a request omits them."""
    return ScoringOptions(
        use_lead_scoring=settings.scoring.use_lead_scoring,
        blend_weight=settings.scoring.blend_weight,
        min_base_score_for_enhancement=settings.scoring.min_base_score_for_enhancement,
    )


def get_batch_scoring_service() -> BatchScoringService:
    return BatchScoringService(default_limit=settings.scoring.default_limit)


async def get_opportunity_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> OpportunityRepository:
    return OpportunityRepository(db_session, batch_size=settings.insert_batch_size)


async def get_opportunity_service(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    repository: Annotated[OpportunityRepository, Depends(get_opportunity_repository)],
) -> OpportunityService:
    return OpportunityService(
        repository,
        insight_repository=CustomerInsightRepository(db_session),
        matcher=CustomerMatcher(settings.scoring.fuzzy_name_threshold),
    )


async def get_upload_service(
    repository: Annotated[OpportunityRepository, Depends(get_opportunity_repository)],
    scoring_service: Annotated[BatchScoringService, Depends(get_batch_scoring_service)],
) -> UploadService:
    return UploadService(repository, scoring_service)
