"""
Bundle Insights Backend - Pydantic Models
All request/response schemas
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel

from insights import ChartType, ColumnType


class BundleSummary(BaseModel):
    id: str
    name: str
    file_name: str
    file_size: int
    total_rows: int
    total_columns: int
    columns: list[str]
    created_at: datetime


class BundleListResponse(BaseModel):
    bundles: list[BundleSummary]


class RenameRequest(BaseModel):
    name: str


class ColumnProfile(BaseModel):
    name: str
    inferred_type: ColumnType
    non_null_count: int
    missing_count: int
    missing_percent: float


class DatasetSummary(BaseModel):
    total_rows: int
    total_columns: int
    numeric_columns: int
    categorical_columns: int
    total_missing: int
    missing_percent: float
    file_size_kb: Optional[float] = None


class OverviewResponse(BaseModel):
    bundle_id: str
    summary: DatasetSummary
    columns: list[ColumnProfile]
    preview: list[dict[str, Any]]
    preview_placeholder: str


class ChartTypeOption(BaseModel):
    chart_type: ChartType
    x_columns: list[str]
    uses_y_axis: bool
    uses_color: bool


class ChartOptionsResponse(BaseModel):
    columns: list[str]
    numeric_columns: list[str]
    categorical_columns: list[str]
    chart_types: list[ChartTypeOption]


class ChartRequest(BaseModel):
    chart_type: ChartType = ChartType.BAR
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    color_column: Optional[str] = None


class ChartResponse(BaseModel):
    chart_type: ChartType
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    color_column: Optional[str] = None
    data: list[dict[str, Any]]
    empty: bool
    message: Optional[str] = None


class ChatRequest(BaseModel):
    message: str


class ChatMessage(BaseModel):
    id: str
    role: str
    content: str
    created_at: datetime


class ChatResponse(BaseModel):
    response: str


class ChatHistoryResponse(BaseModel):
    bundle_id: str
    messages: list[ChatMessage]
