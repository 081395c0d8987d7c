"""Repository for persisted cross-sell opportunities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crosssell.database.models import CrossSellOpportunity, CustomerInsightRecord
from crosssell.repositories.base_repository import BaseRepository
from crosssell.schemas.opportunity import OpportunityFilters, PriorityTier

DEFAULT_INSERT_BATCH_SIZE = 100


@dataclass
class BulkInsertResult:
    created: int = 0
    failed: int = 0
    failed_batches: list[int] = field(default_factory=list)


class OpportunityRepository(BaseRepository[CrossSellOpportunity]):
    """Data access for cross-sell opportunities."""

    def __init__(self, session: AsyncSession, batch_size: int = DEFAULT_INSERT_BATCH_SIZE):
        super().__init__(session, CrossSellOpportunity)
        self.batch_size = batch_size

    async def bulk_insert(self, rows: Sequence[dict[str, Any]]) -> BulkInsertResult:
        """Insert rows in fixed-size batches, one transaction per batch.

        A failed batch is rolled back and counted; it is not retried and
        does not stop the remaining batches.
        """
        result = BulkInsertResult()

        for batch_number, start in enumerate(range(0, len(rows), self.batch_size), start=1):
            batch = rows[start:start + self.batch_size]
            try:
                self.session.add_all([CrossSellOpportunity(**row) for row in batch])
                await self.session.commit()
                result.created += len(batch)
            except SQLAlchemyError as e:
                await self.session.rollback()
                result.failed += len(batch)
                result.failed_batches.append(batch_number)
                self.logger.error(
                    f"Failed to insert opportunity batch {batch_number}: {e}",
                    exc_info=True,
                    extra={"batch_number": batch_number, "batch_size": len(batch)},
                )

        return result

    def _filtered(self, query, filters: OpportunityFilters):
        model = self.model
        query = query.where(model.dismissed == filters.dismissed)
        if filters.agency_id is not None:
            query = query.where(model.agency_id == filters.agency_id)
        if filters.tier is not None:
            query = query.where(model.priority_tier == filters.tier.value)
        if filters.segment_type is not None:
            query = query.where(model.segment_type == filters.segment_type.value)
        if filters.min_priority_score is not None:
            query = query.where(model.priority_score >= filters.min_priority_score)
        if filters.days_until_renewal_max is not None:
            query = query.where(model.days_until_renewal.is_not(None)).where(
                model.days_until_renewal <= filters.days_until_renewal_max
            )
        if filters.search:
            query = query.where(func.lower(model.customer_name).contains(filters.search.lower()))
        return query

    async def list_opportunities(
        self,
        filters: OpportunityFilters,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[CrossSellOpportunity], int]:
        """Filtered page ordered by priority score, plus the filtered total."""
        try:
            query = self._filtered(select(self.model), filters).order_by(
                self.model.priority_score.desc(),
                self.model.priority_rank.asc(),
                self.model.customer_name.asc(),
            )
            result = await self.session.execute(query.offset(offset).limit(limit))
            items = list(result.scalars().all())

            total = (
                await self.session.execute(
                    self._filtered(select(func.count()).select_from(self.model), filters)
                )
            ).scalar_one()
            return items, total
        except SQLAlchemyError as e:
            self._log_failure("listing", e)
            raise

    async def tier_summary(self, agency_id: Optional[str] = None) -> dict[str, int]:
        """Count active opportunities per priority tier."""
        query = (
            select(self.model.priority_tier, func.count())
            .where(self.model.dismissed.is_(False))
            .group_by(self.model.priority_tier)
        )
        if agency_id is not None:
            query = query.where(self.model.agency_id == agency_id)

        counts = {tier.value: 0 for tier in PriorityTier}
        for tier, count in (await self.session.execute(query)).all():
            counts[tier] = count
        return counts

    async def existing_customer_names(self, agency_id: Optional[str] = None) -> set[str]:
        """Names of customers with an active opportunity, as stored."""
        query = select(self.model.customer_name).where(self.model.dismissed.is_(False))
        if agency_id is not None:
            query = query.where(self.model.agency_id == agency_id)
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def dismiss(self, id: UUID, reason: Optional[str] = None) -> Optional[CrossSellOpportunity]:
        """Soft-delete an opportunity; None when it does not exist."""
        return await self.update(
            id,
            dismissed=True,
            dismissed_reason=reason,
            dismissed_at=datetime.now(timezone.utc),
        )

    async def link_task_if_unlinked(self, id: UUID, task_id: str) -> bool:
        """Set task_id only when no task is linked yet.

        Returns:
            True when the task was linked, False when the opportunity does not
            exist or already has a task
        """
        try:
            result = await self.session.execute(
                update(self.model)
                .where(self.model.id == id, self.model.task_id.is_(None))
                .values(task_id=task_id, task_linked_at=datetime.now(timezone.utc))
            )
            await self.session.commit()
            return result.rowcount == 1
        except SQLAlchemyError as e:
            await self.session.rollback()
            self._log_failure(f"linking task {task_id} to", e)
            raise

    async def clear_agency(self, agency_id: str) -> int:
        """Hard-delete every opportunity of an agency before a reseed."""
        try:
            result = await self.session.execute(
                delete(self.model).where(self.model.agency_id == agency_id)
            )
            await self.session.commit()
            self.logger.warning(
                f"Cleared {result.rowcount} opportunities for agency {agency_id}",
                extra={"agency_id": agency_id, "deleted": result.rowcount},
            )
            return result.rowcount
        except SQLAlchemyError as e:
            await self.session.rollback()
            self._log_failure(f"clearing agency {agency_id} from", e)
            raise


class CustomerInsightRepository(BaseRepository[CustomerInsightRecord]):
    """Data access for customer-insight records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, CustomerInsightRecord)

    async def list_for_agency(self, agency_id: Optional[str] = None) -> list[CustomerInsightRecord]:
        query = select(self.model)
        if agency_id is not None:
            query = query.where(self.model.agency_id == agency_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
