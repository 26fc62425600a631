"""
Bundle Insights - Profiler Module
Column type inference, missing-value statistics, and data preview
"""

import math
import re
from enum import Enum
from typing import Any, Optional

from .csv_reader import column_names, rows_to_frame

# Strictly more than this share of non-empty values must parse as numbers.
NUMERIC_THRESHOLD_PERCENT = 80
PREVIEW_ROWS = 10
PREVIEW_PLACEHOLDER = "—"

_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INFINITY_PATTERN = re.compile(r"^[+-]?Infinity$")


class ColumnType(str, Enum):
    NUMERIC = "Numeric"
    CATEGORICAL = "Categorical"


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value == ""


def parse_number(value: Any) -> Optional[float]:
    """Parse a raw cell as a number, or None when it is not numeric"""
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if _NUMBER_PATTERN.match(text) or _INFINITY_PATTERN.match(text):
        return float(text)
    return None


def coerce_value(value: Any) -> Any:
    """Finite numbers come back as int/float, everything else unchanged"""
    number = parse_number(value)
    if number is None or not math.isfinite(number):
        return value
    if number.is_integer():
        return int(number)
    return number


def infer_column_type(values: list[Any]) -> ColumnType:
    """Classify a column from its values; empty cells are ignored"""
    present = [v for v in values if not is_missing(v)]
    numeric_count = sum(1 for v in present if parse_number(v) is not None)
    if numeric_count * 100 > len(present) * NUMERIC_THRESHOLD_PERCENT:
        return ColumnType.NUMERIC
    return ColumnType.CATEGORICAL


def profile_columns(rows: list[dict]) -> list[dict]:
    """Per-column type and missing-value profile in header order"""
    if not rows:
        return []

    df = rows_to_frame(rows)
    total_rows = len(df)
    profiles = []
    for col in df.columns:
        values = df[col].tolist()
        present = [v for v in values if not is_missing(v)]
        non_null_count = len(present)
        missing_count = total_rows - non_null_count
        profiles.append({
            "name": col,
            "inferred_type": infer_column_type(present),
            "non_null_count": non_null_count,
            "missing_count": missing_count,
            "missing_percent": round(missing_count / total_rows * 100, 1),
        })
    return profiles


def numeric_columns(rows: list[dict]) -> list[str]:
    return [p["name"] for p in profile_columns(rows) if p["inferred_type"] == ColumnType.NUMERIC]


def categorical_columns(rows: list[dict]) -> list[str]:
    return [p["name"] for p in profile_columns(rows) if p["inferred_type"] == ColumnType.CATEGORICAL]


def summarize_dataset(rows: list[dict], file_size: Optional[int] = None) -> dict:
    """Headline numbers for the overview cards"""
    profiles = profile_columns(rows)
    total_rows = len(rows)
    total_columns = len(column_names(rows))
    total_missing = sum(p["missing_count"] for p in profiles)
    total_cells = total_rows * total_columns

    return {
        "total_rows": total_rows,
        "total_columns": total_columns,
        "numeric_columns": sum(1 for p in profiles if p["inferred_type"] == ColumnType.NUMERIC),
        "categorical_columns": sum(1 for p in profiles if p["inferred_type"] == ColumnType.CATEGORICAL),
        "total_missing": total_missing,
        "missing_percent": round(total_missing / total_cells * 100, 1) if total_cells else 0.0,
        "file_size_kb": round(file_size / 1024, 1) if file_size is not None else None,
    }


def preview_rows(rows: list[dict], limit: int = PREVIEW_ROWS) -> list[dict]:
    """First rows verbatim, keyed in header order"""
    columns = column_names(rows)
    return [{col: row.get(col, "") for col in columns} for row in rows[:limit]]
