"""Unit tests for CSV decoding and header detection."""

import pytest

from crosssell.core.exceptions import IngestionError
from crosssell.services.ingestion.csv_reader import (
    decode_upload,
    find_header_row_index,
    read_csv_rows,
)


class TestDecodeUpload:

    def test_utf8_bom_is_stripped(self):
        assert decode_upload("\ufeffName,Phone".encode("utf-8")) == "Name,Phone"

    def test_cp1252_fallback(self):
        assert decode_upload("José".encode("cp1252")) == "José"

    def test_text_passes_through(self):
        assert decode_upload("Name") == "Name"


class TestReadCsvRows:

    def test_skips_report_metadata_lines(self):
        text = (
            "Book of Business Report\n"
            "Downloaded 01/01/2025\n"
            "Customer Name,Phone,Premium\n"
            "\"Doe, Jane\",555-123-4567,\"$1,200\"\n"
        )

        rows = read_csv_rows(text)

        assert rows == [{"Customer Name": "Doe, Jane", "Phone": "555-123-4567", "Premium": "$1,200"}]

    def test_header_index_defaults_to_first_line(self):
        assert find_header_row_index(["a,b,c", "1,2,3"]) == 0

    def test_header_detection(self):
        lines = ["Agency Export", "Insured Name,Insured Contact,Premium", "x,y,z"]
        assert find_header_row_index(lines) == 1

    def test_malformed_rows_skipped(self):
        text = "Name,Phone\nJane,555\nBroken\nJohn,556\n"

        rows = read_csv_rows(text)

        assert [row["Name"] for row in rows] == ["Jane", "John"]

    def test_header_only_file_has_no_rows(self):
        assert read_csv_rows("Name,Phone\n") == []

    def test_decode_failure_raises(self, monkeypatch):
        monkeypatch.setattr(
            "crosssell.services.ingestion.csv_reader.SUPPORTED_ENCODINGS", ("ascii",)
        )
        with pytest.raises(IngestionError):
            decode_upload("José".encode("utf-8"))
