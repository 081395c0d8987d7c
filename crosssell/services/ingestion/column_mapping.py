"""Maps Book-of-Business export headers onto opportunity record fields.

Exports use different headers depending on the report type, so each field
has a list of known header variants. Matching is case-insensitive and treats
underscores as spaces.
"""

from typing import Iterable, Optional

COLUMN_MAPPINGS: dict[str, list[str]] = {
    "customer_name": ["Customer Name", "Name", "Full Name", "Client Name", "Insured Name", "Named Insured"],
    "customer_id": ["Customer ID", "Customer Number", "Client ID", "Household ID", "Account Number"],
    # Renewal audit reports split the name
    "first_name": ["Insured First Name", "First Name", "FirstName"],
    "last_name": ["Insured Last Name", "Last Name", "LastName"],
    "phone": [
        "Phone", "Phone Number", "Primary Phone", "Contact Phone", "Tel", "Telephone",
        "Insured Phone", "Insured Contact",
    ],
    "email": [
        "Email", "Email Address", "E-mail", "Primary Email", "Contact Email",
        "Insured Email", "Insured E-mail",
    ],
    "address": ["Address", "Street Address", "Street", "Mailing Address", "Address Line 1", "Insured Address"],
    "city": ["City", "Town", "Municipality"],
    "zip_code": ["Zip", "ZIP Code", "Zip Code", "Postal Code"],
    "renewal_date": [
        "Renewal Date", "Renewal", "Expiration Date", "Policy Renewal", "Exp Date", "Next Renewal",
        "Renewal Effective Date", "Anniversary Effective Date", "X-Date",
    ],
    "current_products": [
        "Current Products", "Products", "Product", "Policy Type", "Coverage", "Line of Business",
        "LOB", "Product Name",
    ],
    "current_premium": [
        "Premium", "Current Premium", "Total Premium", "Annual Premium", "Written Premium",
        "Premium New($)", "Premium Old($)", "Premium new", "Premium Old",
    ],
    "tenure_years": [
        "Tenure", "Years", "Tenure Years", "Customer Since", "Years as Customer",
        "Years Prior Insurance", "Original Year",
    ],
    "policy_count": ["Policy Count", "Policies", "Number of Policies", "# Policies", "Total Policies", "Item Count"],
    "ezpay_status": ["EZPay", "EZ Pay", "Auto Pay", "Autopay", "Payment Status", "Easy Pay"],
    "balance_due": ["Balance", "Balance Due", "Amount Due", "Outstanding Balance", "Amount Due($)"],
    "renewal_status": ["Status", "Renewal Status", "Policy Status", "Account Status"],
    "has_auto": ["Presence of Auto", "Has Auto", "Auto Flag"],
    "has_property": ["Presence of Property", "Has Property", "Has Home", "Property Flag"],
    "has_life": ["Presence of Life", "Has Life", "Life Flag"],
    "has_umbrella": ["Presence of Umbrella", "Has Umbrella", "Umbrella Flag"],
    "monoline_flag": ["Monoline or Multiline Household", "Monoline", "Household Type"],
}

# Header substrings that identify the real header row of a report
HEADER_INDICATORS: list[str] = [
    "Insured First Name",
    "Insured Name",
    "Insured Contact",
    "Customer Name",
    "Name",
    "Phone",
    "Email",
    "Premium",
    "Renewal Date",
    "Policy",
]


def _canonical(header: str) -> str:
    return " ".join(header.replace("_", " ").split()).lower()


_VARIANT_LOOKUP: dict[str, str] = {
    _canonical(variant): field
    for field, variants in COLUMN_MAPPINGS.items()
    for variant in variants
}


def normalize_column_name(header: str) -> Optional[str]:
    """Return the record field a header maps to, or None when unknown."""
    if not header:
        return None
    return _VARIANT_LOOKUP.get(_canonical(header))


def create_column_map(headers: Iterable[str]) -> dict[str, str]:
    """Map record fields to the source header that supplies them.

    The first header mapping to a field wins.
    """
    column_map: dict[str, str] = {}
    for header in headers:
        field = normalize_column_name(header)
        if field and field not in column_map:
            column_map[field] = header
    return column_map
