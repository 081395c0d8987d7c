"""CSV reading for Book-of-Business exports.

Exported reports often start with metadata lines (report title, download
date) before the real header row, so the header row is detected rather
than assumed to be the first line.
"""

import csv
from io import StringIO
from typing import Union

from crosssell.core.exceptions import IngestionError
from crosssell.services.ingestion.column_mapping import HEADER_INDICATORS
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Some reports put the header row a few dozen lines down
HEADER_SCAN_LINES = 50
MIN_HEADER_INDICATORS = 2

SUPPORTED_ENCODINGS = ("utf-8-sig", "cp1252")


def decode_upload(content: Union[bytes, str]) -> str:
    """Decode uploaded bytes, trying UTF-8 (with or without BOM) then cp1252."""
    if isinstance(content, str):
        return content

    for encoding in SUPPORTED_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise IngestionError(f"File is not valid text in any of: {', '.join(SUPPORTED_ENCODINGS)}")


def find_header_row_index(lines: list[str]) -> int:
    """Index of the first line with enough header indicators, else 0."""
    indicators = [indicator.lower() for indicator in HEADER_INDICATORS]
    for index, line in enumerate(lines[:HEADER_SCAN_LINES]):
        lowered = line.lower()
        if sum(1 for indicator in indicators if indicator in lowered) >= MIN_HEADER_INDICATORS:
            return index
    return 0


def read_csv_rows(text: str) -> list[dict[str, str]]:
    """
    Read CSV text into header-keyed rows.

    Args:
        text: Full CSV file content

    Returns:
        One dict per data row; rows whose field count differs from the
        header are skipped
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    header_index = find_header_row_index(lines)
    if header_index:
        LOGGER.info(f"Skipping {header_index} report metadata lines before header row")

    try:
        reader = csv.reader(StringIO("\n".join(lines[header_index:])))
        headers = [header.strip() for header in next(reader)]

        rows: list[dict[str, str]] = []
        skipped = 0
        for values in reader:
            if len(values) != len(headers):
                skipped += 1
                continue
            rows.append({header: value.strip() for header, value in zip(headers, values)})
    except csv.Error as e:
        raise IngestionError(f"Malformed CSV content: {e}", original_error=e)

    if skipped:
        LOGGER.warning(
            f"Skipped {skipped} malformed CSV rows",
            extra={"skipped_rows": skipped, "header_count": len(headers)},
        )

    return rows
