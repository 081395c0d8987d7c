"""
Row parsing for Book-of-Business exports.

Turns raw header-keyed rows into validated OpportunityRecords. Unparseable
values degrade to defaults with a warning; only a missing customer name
rejects a row.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from crosssell.schemas.opportunity import EZPayStatus, OpportunityRecord, RenewalStatus
from crosssell.schemas.upload import RowIssue
from crosssell.services.ingestion.column_mapping import create_column_map
from crosssell.services.scoring.product_gap_classifier import FLAG_PRODUCT_NAMES
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

MM_DD_YYYY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
YYYY_MM_DD = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
MM_DD = re.compile(r"^(\d{1,2})/(\d{1,2})$")
LEADING_INT = re.compile(r"^-?\d+")

EZPAY_YES_VALUES = {"yes", "y", "enrolled", "active", "1", "true"}
FLAG_TRUE_VALUES = {"yes", "y", "1", "true", "x"}

# Tenure values at or above this are read as the year the customer joined
TENURE_YEAR_CUTOFF = 1900


class RowParseResult(BaseModel):
    """Outcome of parsing one row."""

    record: Optional[OpportunityRecord] = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.record is not None and not self.errors


class ParsedRows(BaseModel):
    """Aggregate outcome of parsing a set of rows."""

    records: list[OpportunityRecord] = Field(default_factory=list)
    errors: list[RowIssue] = Field(default_factory=list)
    warnings: list[RowIssue] = Field(default_factory=list)
    total_rows: int = 0


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def parse_date(value: Any, today: Optional[date] = None) -> Optional[date]:
    """Parse MM/DD/YYYY, YYYY-MM-DD or MM/DD (current year) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = _text(value)
    if not text:
        return None

    try:
        match = MM_DD_YYYY.match(text)
        if match:
            month, day, year = (int(part) for part in match.groups())
            return date(year, month, day)

        match = YYYY_MM_DD.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)

        match = MM_DD.match(text)
        if match:
            month, day = (int(part) for part in match.groups())
            return date((today or date.today()).year, month, day)
    except ValueError:
        # Out-of-range month or day
        return None

    return None


def parse_currency(value: Any) -> float:
    """Parse a currency value such as "$1,234.50"; unparseable values are 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0.0 if math.isnan(value) else float(value)

    cleaned = re.sub(r"[$,\s]", "", _text(value))
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def parse_int(value: Any) -> int:
    """Parse the leading integer of a value; unparseable values are 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0 if math.isnan(value) else math.floor(value)

    match = LEADING_INT.match(_text(value).replace(",", ""))
    return int(match.group()) if match else 0


def parse_flag(value: Any) -> Optional[bool]:
    """Interpret a presence flag cell; blank cells are None."""
    text = _text(value).lower()
    if not text:
        return None
    return text in FLAG_TRUE_VALUES


def parse_ezpay_status(value: Any) -> EZPayStatus:
    text = _text(value).lower()
    if text in EZPAY_YES_VALUES:
        return "Yes"
    if "pending" in text:
        return "Pending"
    return "No"


def parse_renewal_status(value: Any) -> RenewalStatus:
    text = _text(value).lower()
    if not text:
        return "Not Taken"
    if "renewed" in text or "completed" in text:
        return "Renewed"
    if "pending" in text or "in progress" in text:
        return "Pending"
    if "risk" in text:
        return "At Risk"
    if "cancel" in text:
        return "Cancelled"
    return "Not Taken"


def parse_tenure(value: Any, today: Optional[date] = None) -> float:
    """Tenure in years; a join year such as 2015 is converted to years."""
    tenure = parse_int(value)
    if tenure >= TENURE_YEAR_CUTOFF:
        tenure = (today or date.today()).year - tenure
    return float(max(0, tenure))


def parse_row(
    row: dict[str, Any],
    column_map: dict[str, str],
    agency_id: Optional[str] = None,
    today: Optional[date] = None,
) -> RowParseResult:
    """
    Parse one header-keyed row into an OpportunityRecord.

    Args:
        row: Raw row keyed by source header
        column_map: Field to source header mapping from create_column_map
        agency_id: Agency the records belong to
        today: Reference date for partial dates and join years

    Returns:
        RowParseResult with the record, or errors when the row is rejected
    """
    errors: list[str] = []
    warnings: list[str] = []

    def get_value(field: str) -> Any:
        header = column_map.get(field)
        return row.get(header) if header else None

    customer_name = _text(get_value("customer_name"))
    if not customer_name:
        customer_name = " ".join(
            part for part in (_text(get_value("first_name")), _text(get_value("last_name"))) if part
        )
    if not customer_name:
        return RowParseResult(errors=["Customer name is required"])

    phone = _text(get_value("phone"))
    email = _text(get_value("email"))

    raw_renewal = get_value("renewal_date")
    renewal_date = parse_date(raw_renewal, today)
    if renewal_date is None and _text(raw_renewal):
        warnings.append(f"Could not parse renewal date: {_text(raw_renewal)}")

    flags = {line: parse_flag(get_value(f"has_{line}")) for line in FLAG_PRODUCT_NAMES}
    flagged_products = [FLAG_PRODUCT_NAMES[line] for line, present in flags.items() if present]
    current_products = ", ".join(flagged_products) or _text(get_value("current_products")) or "Unknown"

    current_premium = parse_currency(get_value("current_premium"))
    balance_due = parse_currency(get_value("balance_due"))
    if current_premium < 0:
        warnings.append(f"Negative premium {current_premium} treated as 0")
        current_premium = 0.0
    if balance_due < 0:
        # Credit balances are not amounts due
        balance_due = 0.0

    policy_count = parse_int(get_value("policy_count")) or 1

    try:
        record = OpportunityRecord(
            customer_name=customer_name,
            customer_id=_text(get_value("customer_id")) or None,
            agency_id=agency_id,
            phone=phone,
            email=email,
            address=_text(get_value("address")),
            city=_text(get_value("city")),
            zip_code=_text(get_value("zip_code")),
            current_products=current_products,
            has_auto=flags["auto"],
            has_property=flags["property"],
            has_life=flags["life"],
            has_umbrella=flags["umbrella"],
            monoline_flag=_text(get_value("monoline_flag")) or None,
            policy_count=max(1, policy_count),
            current_premium=current_premium,
            tenure_years=parse_tenure(get_value("tenure_years"), today),
            renewal_date=renewal_date,
            renewal_status=parse_renewal_status(get_value("renewal_status")),
            balance_due=balance_due,
            ezpay_status=parse_ezpay_status(get_value("ezpay_status")),
        )
    except ValidationError as e:
        errors.extend(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
        return RowParseResult(errors=errors, warnings=warnings)

    if not phone and not email:
        warnings.append("No contact information (phone or email)")
    if renewal_date is None:
        warnings.append("No renewal date - will use default scoring")

    return RowParseResult(record=record, warnings=warnings)


def parse_rows(
    rows: list[dict[str, Any]],
    agency_id: Optional[str] = None,
    today: Optional[date] = None,
) -> ParsedRows:
    """Parse every row, collecting valid records and per-row issues."""
    if not rows:
        return ParsedRows()

    headers: list[str] = []
    for row in rows:
        headers.extend(header for header in row if header not in headers)
    column_map = create_column_map(headers)

    if "customer_name" not in column_map and not (
        "first_name" in column_map or "last_name" in column_map
    ):
        LOGGER.warning(
            "No customer name column found",
            extra={"headers": headers[:20]},
        )

    parsed = ParsedRows(total_rows=len(rows))
    for index, row in enumerate(rows, start=1):
        result = parse_row(row, column_map, agency_id, today)
        if result.is_valid:
            parsed.records.append(result.record)
        else:
            parsed.errors.append(RowIssue(row=index, messages=result.errors))
        if result.warnings:
            parsed.warnings.append(RowIssue(row=index, messages=result.warnings))

    LOGGER.info(
        "Parsed rows",
        extra={
            "total_rows": parsed.total_rows,
            "valid": len(parsed.records),
            "errors": len(parsed.errors),
        },
    )
    return parsed
