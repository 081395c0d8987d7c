"""Unit tests for Book-of-Business value and row parsing."""

from datetime import date

import pytest

from crosssell.services.ingestion.column_mapping import create_column_map, normalize_column_name
from crosssell.services.ingestion.row_parser import (
    parse_currency,
    parse_date,
    parse_ezpay_status,
    parse_flag,
    parse_int,
    parse_renewal_status,
    parse_rows,
    parse_tenure,
)

TODAY = date(2025, 1, 1)


class TestValueParsers:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("03/15/2025", date(2025, 3, 15)),
            ("2025-3-5", date(2025, 3, 5)),
            ("3/15", date(2025, 3, 15)),
            ("13/45/2025", None),
            ("next spring", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_date(self, value, expected):
        assert parse_date(value, TODAY) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [("$1,234.50", 1234.5), ("  800 ", 800.0), ("", 0.0), ("n/a", 0.0), ("-50", -50.0), (42, 42.0)],
    )
    def test_parse_currency(self, value, expected):
        assert parse_currency(value) == expected

    def test_parse_int(self):
        assert parse_int("3 policies") == 3
        assert parse_int("1,200") == 1200
        assert parse_int("") == 0
        assert parse_int(2.7) == 2

    def test_parse_tenure_join_year(self):
        assert parse_tenure("2015", TODAY) == 10.0
        assert parse_tenure("7", TODAY) == 7.0
        assert parse_tenure("2030", TODAY) == 0.0

    def test_parse_flag(self):
        assert parse_flag("Y") is True
        assert parse_flag("no") is False
        assert parse_flag("") is None

    def test_parse_ezpay_status(self):
        assert parse_ezpay_status("Enrolled") == "Yes"
        assert parse_ezpay_status("Pending setup") == "Pending"
        assert parse_ezpay_status("") == "No"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Renewed", "Renewed"),
            ("In Progress", "Pending"),
            ("At Risk", "At Risk"),
            ("Cancelled", "Cancelled"),
            ("", "Not Taken"),
            ("whatever", "Not Taken"),
        ],
    )
    def test_parse_renewal_status(self, value, expected):
        assert parse_renewal_status(value) == expected


class TestColumnMapping:

    def test_normalize_column_name(self):
        assert normalize_column_name("customer_name") == "customer_name"
        assert normalize_column_name("PHONE  NUMBER") == "phone"
        assert normalize_column_name("Favourite Colour") is None

    def test_first_header_wins(self):
        column_map = create_column_map(["Premium", "Total Premium", "Name"])

        assert column_map["current_premium"] == "Premium"
        assert column_map["customer_name"] == "Name"


class TestParseRows:

    def test_valid_and_invalid_rows(self):
        rows = [
            {"Customer Name": "Jane Doe", "Premium": "$1,500", "Renewal Date": "02/01/2025", "Phone": "5551234567"},
            {"Customer Name": "", "Premium": "$900", "Renewal Date": "", "Phone": ""},
        ]
        parsed = parse_rows(rows, agency_id="agency-1", today=TODAY)

        assert parsed.total_rows == 2
        assert len(parsed.records) == 1
        record = parsed.records[0]
        assert record.customer_name == "Jane Doe"
        assert record.current_premium == 1500.0
        assert record.renewal_date == date(2025, 2, 1)
        assert record.agency_id == "agency-1"
        assert record.current_products == "Unknown"
        assert parsed.errors[0].row == 2
        assert parsed.errors[0].messages == ["Customer name is required"]

    def test_split_name_and_presence_flags(self):
        rows = [
            {
                "Insured First Name": "John",
                "Insured Last Name": "Smith",
                "Presence of Auto": "Y",
                "Presence of Property": "Y",
                "Monoline or Multiline Household": "Multiline Household",
                "Original Year": "2018",
            }
        ]
        record = parse_rows(rows, today=TODAY).records[0]

        assert record.customer_name == "John Smith"
        assert record.current_products == "Auto, Property"
        assert record.has_auto is True
        assert record.has_life is None
        assert record.monoline_flag == "Multiline Household"
        assert record.tenure_years == 7.0

    def test_negative_values_are_clamped(self):
        rows = [{"Name": "Credit Customer", "Premium": "-200", "Balance Due": "-35.00", "Email": "c@x.com"}]
        parsed = parse_rows(rows, today=TODAY)
        record = parsed.records[0]

        assert record.current_premium == 0.0
        assert record.balance_due == 0.0
        assert any("Negative premium" in message for message in parsed.warnings[0].messages)

    def test_unparseable_renewal_date_warns(self):
        rows = [{"Name": "Jane", "Renewal Date": "soon", "Phone": "5551234567"}]
        parsed = parse_rows(rows, today=TODAY)

        assert parsed.records[0].renewal_date is None
        assert "Could not parse renewal date: soon" in parsed.warnings[0].messages

    def test_empty_rows(self):
        assert parse_rows([]).total_rows == 0
