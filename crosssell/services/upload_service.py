"""
Book-of-Business upload processing.

read -> parse -> score -> persist. Scoring runs on the full record set so
ranks and statistics describe the whole upload; persistence happens in
fixed-size batches through the repository.
"""

from datetime import date
from typing import Any, Optional, Union
from uuid import uuid4

from crosssell.core.exceptions import IngestionError
from crosssell.repositories.opportunity_repository import OpportunityRepository
from crosssell.schemas.scoring import ScoredOpportunity, ScoringOptions
from crosssell.schemas.upload import UploadSummary
from crosssell.services.ingestion.csv_reader import decode_upload, read_csv_rows
from crosssell.services.ingestion.row_parser import ParsedRows, parse_rows
from crosssell.services.matching.customer_matcher import normalize_customer_name
from crosssell.services.scoring.batch_scoring_service import BatchScoringService, compute_statistics
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Upload summaries carry at most this many parsing errors and warnings
MAX_REPORTED_ISSUES = 10


def to_persistence_row(
    scored: ScoredOpportunity,
    agency_id: Optional[str],
    upload_batch_id: str,
) -> dict[str, Any]:
    """Flatten a scored opportunity into CrossSellOpportunity column values."""
    record = scored.record
    days = scored.days_until_renewal

    return {
        "agency_id": agency_id or record.agency_id,
        "upload_batch_id": upload_batch_id,
        "customer_id": record.customer_id,
        "customer_name": record.customer_name,
        "phone": record.phone,
        "email": record.email,
        "address": record.address,
        "city": record.city,
        "zip_code": record.zip_code,
        "current_products": record.current_products,
        "policy_count": record.policy_count,
        "current_premium": record.current_premium,
        "tenure_years": record.tenure_years,
        "renewal_date": record.renewal_date,
        # Stored renewal proximity is never negative
        "days_until_renewal": max(0, days) if days is not None else None,
        "renewal_status": record.renewal_status,
        "balance_due": record.balance_due,
        "ezpay_status": record.ezpay_status,
        "is_true_monoline": scored.gap.is_true_monoline,
        "recommended_product": scored.gap.recommended_product,
        "segment_type": scored.gap.segment_type.value,
        "priority_score": scored.result.score,
        "legacy_score": scored.result.legacy_score,
        "base_score": scored.result.base_score,
        "lead_score": scored.result.lead_score,
        "priority_tier": scored.result.tier.value,
        "priority_rank": scored.priority_rank,
        "confidence": scored.result.confidence,
        "enhanced": scored.result.enhanced,
        "customer_segment": scored.customer_segment.value,
        "potential_premium_add": scored.potential_premium_add,
        "expected_conversion_pct": scored.expected_conversion_pct,
        "retention_lift_pct": scored.retention_lift_pct,
        "talking_points": list(scored.talking_points),
    }


class UploadService:
    """Processes uploaded Book-of-Business data into persisted opportunities."""

    def __init__(
        self,
        repository: Optional[OpportunityRepository],
        scoring_service: Optional[BatchScoringService] = None,
    ):
        self.repository = repository
        self.scoring_service = scoring_service or BatchScoringService()

    async def process_csv(
        self,
        content: Union[bytes, str],
        agency_id: Optional[str] = None,
        options: Optional[ScoringOptions] = None,
        dry_run: bool = False,
        skip_duplicates: bool = False,
        replace_existing: bool = False,
        as_of: Optional[date] = None,
    ) -> UploadSummary:
        """
        Process an uploaded CSV file.

        Args:
            content: Raw file bytes or decoded text
            agency_id: Agency the records belong to
            options: Scoring options for the whole upload
            dry_run: Score without persisting
            skip_duplicates: Skip customers that already have an active opportunity
            replace_existing: Delete the agency's stored opportunities first
            as_of: Reference date, defaults to today

        Returns:
            UploadSummary with counts, parsing issues and statistics

        Raises:
            IngestionError: If the file has no data rows or no valid records
        """
        rows = read_csv_rows(decode_upload(content))
        if not rows:
            raise IngestionError("No data rows found in file")

        return await self.process_rows(
            rows, agency_id, options, dry_run, skip_duplicates, replace_existing, as_of
        )

    async def process_rows(
        self,
        rows: list[dict[str, Any]],
        agency_id: Optional[str] = None,
        options: Optional[ScoringOptions] = None,
        dry_run: bool = False,
        skip_duplicates: bool = False,
        replace_existing: bool = False,
        as_of: Optional[date] = None,
    ) -> UploadSummary:
        """Process already-parsed header-keyed rows."""
        as_of = as_of or date.today()
        parsed: ParsedRows = parse_rows(rows, agency_id, as_of)
        if not parsed.records:
            raise IngestionError(
                f"No valid records found in {parsed.total_rows} rows"
            )

        ranked = self.scoring_service.score_all(parsed.records, options, as_of)
        statistics = compute_statistics(ranked)
        upload_batch_id = str(uuid4())

        summary = UploadSummary(
            upload_batch_id=upload_batch_id,
            agency_id=agency_id,
            dry_run=dry_run,
            total_rows=parsed.total_rows,
            valid_records=len(parsed.records),
            parsing_errors=parsed.errors[:MAX_REPORTED_ISSUES],
            parsing_warnings=parsed.warnings[:MAX_REPORTED_ISSUES],
            statistics=statistics,
        )

        if dry_run or self.repository is None:
            return summary

        if replace_existing and agency_id:
            summary.records_replaced = await self.repository.clear_agency(agency_id)

        to_insert = ranked
        if skip_duplicates:
            existing = {
                normalize_customer_name(name)
                for name in await self.repository.existing_customer_names(agency_id)
            }
            to_insert = [
                opp for opp in ranked
                if normalize_customer_name(opp.record.customer_name) not in existing
            ]
            summary.records_skipped = len(ranked) - len(to_insert)

        result = await self.repository.bulk_insert(
            [to_persistence_row(opp, agency_id, upload_batch_id) for opp in to_insert]
        )
        summary.records_created = result.created
        summary.records_failed = result.failed

        LOGGER.info(
            "Upload processed",
            extra={
                "upload_batch_id": upload_batch_id,
                "agency_id": agency_id,
                "records_created": result.created,
                "records_skipped": summary.records_skipped,
                "records_replaced": summary.records_replaced,
                "records_failed": result.failed,
            },
        )
        return summary
