"""Lifecycle operations on persisted opportunities: list, dismiss, link task."""

from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from crosssell.core.exceptions import OpportunityNotFoundError, TaskAlreadyLinkedError
from crosssell.database.models import CrossSellOpportunity
from crosssell.repositories.opportunity_repository import (
    CustomerInsightRepository,
    OpportunityRepository,
)
from crosssell.schemas.customer import CustomerInsight, CustomerMatch
from crosssell.schemas.opportunity import (
    OpportunityFilters,
    OpportunityListResponse,
    OpportunityResponse,
    PriorityTier,
)
from crosssell.schemas.tasks import TaskDraft, TaskPriority
from crosssell.services.matching.customer_matcher import CustomerMatcher
from crosssell.services.segmentation.customer_segmentation import get_customer_segment
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

TASK_PRIORITY_BY_TIER: dict[str, TaskPriority] = {
    PriorityTier.HOT.value: "urgent",
    PriorityTier.HIGH.value: "high",
    PriorityTier.MEDIUM.value: "medium",
    PriorityTier.LOW.value: "low",
}


def build_task_notes(opportunity: CrossSellOpportunity) -> str:
    """Markdown notes summarising the opportunity for the task assignee."""
    parts = ["**Cross-sell Opportunity**", ""]

    if opportunity.current_products:
        parts.append(f"**Current:** {opportunity.current_products}")
    if opportunity.recommended_product:
        parts.append(f"**Recommended:** {opportunity.recommended_product}")
    if opportunity.potential_premium_add:
        parts.append(f"**Potential:** ${opportunity.potential_premium_add:,.0f}/yr")
    if opportunity.expected_conversion_pct:
        parts.append(f"**Conversion Rate:** {opportunity.expected_conversion_pct}%")

    talking_points = [point for point in (opportunity.talking_points or []) if point]
    if talking_points:
        parts.extend(["", "**Talking Points:**"])
        parts.extend(f"- {point}" for point in talking_points)

    if opportunity.phone or opportunity.email:
        parts.extend(["", "**Contact:**"])
        if opportunity.phone:
            parts.append(f"- Phone: {opportunity.phone}")
        if opportunity.email:
            parts.append(f"- Email: {opportunity.email}")

    return "\n".join(parts)


class OpportunityService:
    """Service for persisted opportunity lifecycle operations."""

    def __init__(
        self,
        repository: OpportunityRepository,
        insight_repository: Optional[CustomerInsightRepository] = None,
        matcher: Optional[CustomerMatcher] = None,
    ):
        self.repository = repository
        self.insight_repository = insight_repository
        self.matcher = matcher or CustomerMatcher()

    async def list_opportunities(
        self,
        filters: OpportunityFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> OpportunityListResponse:
        items, total = await self.repository.list_opportunities(filters, limit, offset)
        tier_summary = await self.repository.tier_summary(filters.agency_id)

        return OpportunityListResponse(
            opportunities=[OpportunityResponse.model_validate(item) for item in items],
            total=total,
            limit=limit,
            offset=offset,
            tier_summary=tier_summary,
        )

    async def dismiss(self, opportunity_id: UUID, reason: Optional[str] = None) -> OpportunityResponse:
        """
        Dismiss (soft-delete) an opportunity.

        Raises:
            OpportunityNotFoundError: If the opportunity does not exist
        """
        opportunity = await self.repository.dismiss(opportunity_id, reason)
        if opportunity is None:
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")

        LOGGER.info(
            "Opportunity dismissed",
            extra={"opportunity_id": str(opportunity_id), "reason": reason},
        )
        return OpportunityResponse.model_validate(opportunity)

    async def link_task(
        self,
        opportunity_id: UUID,
        task_id: str,
        text: Optional[str] = None,
    ) -> TaskDraft:
        """
        Link a task to an opportunity and build the task draft.

        A task can be linked at most once.

        Args:
            opportunity_id: Opportunity to link
            task_id: Identifier of the created task
            text: Custom task text, generated when omitted

        Returns:
            TaskDraft for the linked task

        Raises:
            OpportunityNotFoundError: If the opportunity does not exist
            TaskAlreadyLinkedError: If a task is already linked
        """
        opportunity = await self.repository.get_by_id(opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")
        if opportunity.task_id:
            raise TaskAlreadyLinkedError(
                "Task already exists for this opportunity", task_id=opportunity.task_id
            )

        # Build before linking so a failed draft leaves the opportunity unlinked
        draft = await self.build_task_draft(opportunity, task_id, text)

        linked = await self.repository.link_task_if_unlinked(opportunity_id, task_id)
        if not linked:
            # Another request linked a task between the check and the update
            await self.repository.session.refresh(opportunity)
            raise TaskAlreadyLinkedError(
                "Task already exists for this opportunity", task_id=opportunity.task_id
            )

        await self.repository.session.refresh(opportunity)
        LOGGER.info(
            "Task linked to opportunity",
            extra={"opportunity_id": str(opportunity_id), "task_id": task_id},
        )
        return draft

    async def _match_customer(self, opportunity: CrossSellOpportunity) -> Optional[CustomerMatch]:
        if self.insight_repository is None:
            return None
        records = await self.insight_repository.list_for_agency(opportunity.agency_id)
        candidates = []
        for record in records:
            try:
                candidates.append(CustomerInsight.model_validate(record))
            except ValidationError as e:
                LOGGER.warning(
                    f"Skipping invalid customer insight {record.id}: {e.error_count()} errors",
                    extra={"customer_insight_id": str(record.id)},
                )
        return self.matcher.match(opportunity.customer_name, candidates, opportunity.customer_id)

    async def build_task_draft(
        self,
        opportunity: CrossSellOpportunity,
        task_id: str,
        text: Optional[str] = None,
    ) -> TaskDraft:
        """Build task content; the customer segment uses household totals when matched."""
        match = await self._match_customer(opportunity)

        if match is not None:
            total_premium = match.insight.total_premium
            policy_count = match.insight.policy_count
        else:
            total_premium = opportunity.current_premium or 0
            policy_count = opportunity.policy_count or 1

        return TaskDraft(
            opportunity_id=opportunity.id,
            task_id=task_id,
            text=text or f"Contact {opportunity.customer_name} about {opportunity.recommended_product} opportunity",
            priority=TASK_PRIORITY_BY_TIER.get(opportunity.priority_tier, "medium"),
            due_date=opportunity.renewal_date,
            customer_name=opportunity.customer_name,
            customer_segment=get_customer_segment(total_premium, policy_count),
            customer_insight_id=match.insight.id if match else None,
            customer_match_method=match.method if match else None,
            notes=build_task_notes(opportunity),
        )
