"""
Bundle Insights - CSV Reader Module
Naive CSV parsing and upload validation for bundle ingestion
"""

import re
from typing import Optional

import pandas as pd

MAX_FILE_SIZE = 10 * 1024 * 1024
MIN_CONTENT_LENGTH = 10
MAX_ROWS = 50000
MAX_COLUMNS = 100
ALLOWED_CONTENT_TYPES = {"text/csv", "application/csv"}
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
MALICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"onload=", re.IGNORECASE),
    re.compile(r"onerror=", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"document\.write", re.IGNORECASE),
]


def _non_blank_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line.strip()]


def read_header(text: str) -> list[str]:
    """Header names from the first non-blank line"""
    lines = _non_blank_lines(text)
    if not lines:
        return []
    return [h.strip() for h in lines[0].split(",")]


def parse_csv_text(text: str) -> list[dict[str, str]]:
    """
    Split CSV text into rows keyed by header name.

    Lines are split on '\\n' and fields on ',' with no quoting support, so a
    quoted comma still splits the field. Short rows are padded with empty
    strings; surplus fields are ignored.
    """
    lines = _non_blank_lines(text)
    if not lines:
        return []

    headers = [h.strip() for h in lines[0].split(",")]
    rows = []
    for line in lines[1:]:
        values = line.split(",")
        row = {}
        for index, header in enumerate(headers):
            row[header] = values[index].strip() if index < len(values) else ""
        rows.append(row)
    return rows


def column_names(rows: list[dict]) -> list[str]:
    """Column order is the key order of the first row"""
    if not rows:
        return []
    return list(rows[0].keys())


def rows_to_frame(rows: list[dict]) -> pd.DataFrame:
    """String frame of the dataset; absent fields become NaN"""
    columns = column_names(rows)
    if not columns:
        return pd.DataFrame()
    return pd.DataFrame(rows, columns=columns, dtype=object)


def validate_csv_file(filename: str, size: int, content_type: Optional[str] = None) -> tuple[bool, Optional[str]]:
    """Check upload metadata before the body is parsed"""
    if size > MAX_FILE_SIZE:
        return False, "File size must be less than 10MB"

    if content_type and content_type not in ALLOWED_CONTENT_TYPES:
        return False, "File must be a CSV file"

    if not filename or not filename.lower().endswith(".csv"):
        return False, "File must have a .csv extension"

    if INVALID_FILENAME_CHARS.search(filename):
        return False, "File name contains invalid characters"

    return True, None


def validate_csv_content(text: str) -> tuple[bool, Optional[str]]:
    """Structural and content checks on the decoded CSV text"""
    if len(text) < MIN_CONTENT_LENGTH:
        return False, "File appears to be empty or too small"

    lines = _non_blank_lines(text)
    if len(lines) < 2:
        return False, "CSV file must have at least a header and one data row"

    headers = lines[0].split(",")
    if len(lines) > MAX_ROWS:
        return False, "CSV file has too many rows (max 50,000)"

    if len(headers) > MAX_COLUMNS:
        return False, "CSV file has too many columns (max 100)"

    for pattern in MALICIOUS_PATTERNS:
        if pattern.search(text):
            return False, "File contains potentially malicious content"

    return True, None
