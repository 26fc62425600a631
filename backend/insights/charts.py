"""
Bundle Insights - Charts Module
Chart-ready series for bar, line, scatter, histogram, and pie charts
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd

from .csv_reader import column_names, rows_to_frame
from .profiler import categorical_columns, coerce_value, is_missing, numeric_columns, parse_number

HISTOGRAM_BINS = 10
UNKNOWN_CATEGORY = "Unknown"
NO_COLOR = {"", "none"}


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    SCATTER = "scatter"
    HISTOGRAM = "histogram"
    PIE = "pie"


POINT_CHARTS = {ChartType.BAR, ChartType.LINE, ChartType.SCATTER}
COLOR_CHARTS = {ChartType.LINE, ChartType.SCATTER}


@dataclass
class ChartSpec:
    chart_type: ChartType
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    color_column: Optional[str] = None


def point_series(rows: list[dict], x_col: str, y_col: Optional[str], color_col: Optional[str] = None) -> list[dict]:
    """x/y points with numeric coercion; rows missing an axis value are dropped"""
    points = []
    for row in rows:
        x_val = row.get(x_col)
        if is_missing(x_val):
            continue
        point = {"x": coerce_value(x_val)}
        if y_col:
            y_val = row.get(y_col)
            if is_missing(y_val):
                continue
            point["y"] = coerce_value(y_val)
        if color_col:
            point["color"] = row.get(color_col)
        points.append(point)
    return points


def count_series(rows: list[dict], x_col: str) -> list[dict]:
    """Row count per distinct x value, first-seen order"""
    if not rows:
        return []
    df = rows_to_frame(rows)
    present = df[x_col][~df[x_col].map(is_missing)]
    if present.empty:
        return []
    series = pd.Series([coerce_value(v) for v in present], dtype=object)
    counts = series.groupby(series, sort=False).size()
    return [{"x": value, "y": int(count)} for value, count in counts.items()]


def histogram_series(rows: list[dict], x_col: str, bins: int = HISTOGRAM_BINS) -> list[dict]:
    """Equal-width bins over [min, max] of the parsable values"""
    parsed = [parse_number(row.get(x_col)) for row in rows]
    values = np.array([v for v in parsed if v is not None and np.isfinite(v)], dtype=float)
    if values.size == 0:
        return []

    low, high = float(values.min()), float(values.max())
    width = (high - low) / bins
    if np.isfinite(width):
        edges = [low + i * width for i in range(bins + 1)]
        positions = (values - low) / width if width > 0 else np.zeros(values.size)
    else:
        # high - low overflows; work on pre-divided values
        width = high / bins - low / bins
        edges = [low * (1 - i / bins) + high * (i / bins) for i in range(bins + 1)]
        positions = (values / bins - low / bins) / width * bins
    indices = np.clip(np.floor(positions), 0, bins - 1).astype(int)
    counts = np.bincount(indices, minlength=bins)

    return [
        {
            "range": f"{edges[i]:.1f}–{edges[i + 1]:.1f}",
            "count": int(counts[i]),
        }
        for i in range(bins)
    ]


def pie_series(rows: list[dict], x_col: str) -> list[dict]:
    """Occurrences per category, missing values counted as 'Unknown'"""
    if not rows:
        return []
    df = rows_to_frame(rows)
    categories = df[x_col].map(lambda v: UNKNOWN_CATEGORY if is_missing(v) else v)
    counts = categories.groupby(categories, sort=False).size()
    return [{"name": name, "value": int(count)} for name, count in counts.items()]


def derive_chart_series(rows: list[dict], spec: ChartSpec) -> list[dict]:
    """
    Build the render-ready series for a chart selection.

    Incomplete or unresolvable selections give an empty list so the caller can
    show its "no data" state.
    """
    if not rows or not spec.x_column:
        return []

    columns = column_names(rows)
    if spec.x_column not in columns:
        return []
    if spec.y_column and spec.y_column not in columns:
        return []

    color_col = spec.color_column if spec.color_column not in NO_COLOR else None
    if color_col and color_col not in columns:
        return []

    chart_type = spec.chart_type
    if chart_type == ChartType.HISTOGRAM:
        return histogram_series(rows, spec.x_column)
    if chart_type == ChartType.PIE:
        return pie_series(rows, spec.x_column)
    if chart_type in POINT_CHARTS:
        if spec.y_column:
            return point_series(rows, spec.x_column, spec.y_column, color_col)
        if chart_type == ChartType.BAR:
            return count_series(rows, spec.x_column)
    return []


def chart_options(rows: list[dict]) -> dict:
    """Columns selectable for each axis, plus which chart kinds use them"""
    columns = column_names(rows)
    numeric = numeric_columns(rows)
    categorical = categorical_columns(rows)

    chart_types = []
    for chart_type in ChartType:
        if chart_type == ChartType.HISTOGRAM:
            x_options = numeric
        elif chart_type == ChartType.PIE:
            x_options = categorical
        else:
            x_options = columns
        chart_types.append({
            "chart_type": chart_type,
            "x_columns": x_options,
            "uses_y_axis": chart_type in POINT_CHARTS,
            "uses_color": chart_type in COLOR_CHARTS,
        })

    return {
        "columns": columns,
        "numeric_columns": numeric,
        "categorical_columns": categorical,
        "chart_types": chart_types,
    }
