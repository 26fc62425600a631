"""
Bundle Insights Core Modules
"""

from .csv_reader import (
    parse_csv_text,
    read_header,
    column_names,
    rows_to_frame,
    validate_csv_file,
    validate_csv_content,
)

from .profiler import (
    ColumnType,
    PREVIEW_PLACEHOLDER,
    parse_number,
    coerce_value,
    infer_column_type,
    profile_columns,
    numeric_columns,
    categorical_columns,
    summarize_dataset,
    preview_rows,
)

from .charts import (
    ChartType,
    ChartSpec,
    derive_chart_series,
    histogram_series,
    pie_series,
    point_series,
    count_series,
    chart_options,
)

from .chat_context import (
    ChatProviderError,
    get_openai_client,
    prepare_data_sample,
    build_bundle_info,
    request_analysis,
)

from .validation import (
    sanitize_input,
    validate_bundle_name,
    validate_chat_message,
)

__all__ = [
    # CSV Reader
    'parse_csv_text',
    'read_header',
    'column_names',
    'rows_to_frame',
    'validate_csv_file',
    'validate_csv_content',
    # Profiler
    'ColumnType',
    'PREVIEW_PLACEHOLDER',
    'parse_number',
    'coerce_value',
    'infer_column_type',
    'profile_columns',
    'numeric_columns',
    'categorical_columns',
    'summarize_dataset',
    'preview_rows',
    # Charts
    'ChartType',
    'ChartSpec',
    'derive_chart_series',
    'histogram_series',
    'pie_series',
    'point_series',
    'count_series',
    'chart_options',
    # Chat Context
    'ChatProviderError',
    'get_openai_client',
    'prepare_data_sample',
    'build_bundle_info',
    'request_analysis',
    # Validation
    'sanitize_input',
    'validate_bundle_name',
    'validate_chat_message',
]
