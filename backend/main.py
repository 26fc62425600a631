"""
Bundle Insights Backend - CSV bundles, profiling, charts, and AI chat
Upload CSV bundles, inspect column profiles, derive chart series, and ask an LLM about the data
"""

import logging
import os
from time import perf_counter

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from config import API_VERSION, CHAT_SAMPLE_ROWS, CORS_ORIGINS, LOG_LEVEL, OPENAI_MODEL

# Import models
from models import (
    BundleSummary, BundleListResponse, RenameRequest, ColumnProfile,
    DatasetSummary, OverviewResponse, ChartTypeOption, ChartOptionsResponse,
    ChartRequest, ChartResponse, ChatRequest, ChatMessage, ChatResponse,
    ChatHistoryResponse,
)

# Import storage
from storage import (
    BundleInfo, get_bundle, store_bundle, list_bundles, rename_bundle,
    delete_bundle, append_chat_message, get_chat_history, clear_chat_history,
)

# Import core modules
from insights import (
    PREVIEW_PLACEHOLDER,
    ChartSpec,
    ChatProviderError,
    parse_csv_text,
    column_names,
    validate_csv_file,
    validate_csv_content,
    profile_columns,
    summarize_dataset,
    preview_rows,
    derive_chart_series,
    chart_options,
    get_openai_client,
    prepare_data_sample,
    build_bundle_info,
    request_analysis,
    sanitize_input,
    validate_bundle_name,
    validate_chat_message,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bundle Insights API",
    description="CSV bundles with column profiling, chart series, and AI analysis",
    version=API_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

NO_DATA_MESSAGE = "No data to display"


# ============================================================================
# Helper Functions
# ============================================================================

def to_summary(bundle: BundleInfo) -> BundleSummary:
    return BundleSummary(
        id=bundle.id,
        name=bundle.name,
        file_name=bundle.file_name,
        file_size=bundle.file_size,
        total_rows=bundle.total_rows,
        total_columns=len(bundle.columns),
        columns=bundle.columns,
        created_at=bundle.created_at,
    )


def log_pipeline_timing(endpoint: str, durations: dict[str, float]) -> None:
    """Log execution timings for request pipeline phases"""
    phases = ", ".join(f"{name}={seconds:.3f}s" for name, seconds in durations.items())
    logger.info("%s pipeline timing: %s", endpoint, phases)


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/")
async def root():
    return {"status": "ok", "version": API_VERSION}


@app.post("/bundles", response_model=BundleSummary, status_code=201)
async def upload_bundle(name: str = Form(...), file: UploadFile = File(...)):
    valid, error = validate_bundle_name(name)
    if not valid:
        raise HTTPException(status_code=400, detail=error)

    endpoint_start = perf_counter()
    raw = await file.read()
    valid, error = validate_csv_file(file.filename or "", len(raw), file.content_type)
    if not valid:
        raise HTTPException(status_code=400, detail=error)

    text = raw.decode("utf-8-sig", errors="replace")
    t0 = perf_counter()
    valid, error = validate_csv_content(text)
    if not valid:
        raise HTTPException(status_code=400, detail=error)
    t1 = perf_counter()

    rows = parse_csv_text(text)
    columns = column_names(rows)
    t2 = perf_counter()

    bundle = BundleInfo(
        name=sanitize_input(name),
        file_name=file.filename,
        file_size=len(raw),
        rows=rows,
        columns=columns,
    )
    store_bundle(bundle)
    logger.info("Stored bundle %s (%s): %d rows, %d columns", bundle.id, bundle.file_name, len(rows), len(columns))

    log_pipeline_timing("/bundles", {
        "validation": t1 - t0,
        "parsing": t2 - t1,
        "total": perf_counter() - endpoint_start,
    })
    return to_summary(bundle)


@app.get("/bundles", response_model=BundleListResponse)
async def list_bundles_endpoint():
    return BundleListResponse(bundles=[to_summary(b) for b in list_bundles()])


@app.get("/bundles/{bundle_id}", response_model=BundleSummary)
async def get_bundle_endpoint(bundle_id: str):
    return to_summary(get_bundle(bundle_id))


@app.patch("/bundles/{bundle_id}", response_model=BundleSummary)
async def rename_bundle_endpoint(bundle_id: str, request: RenameRequest):
    valid, error = validate_bundle_name(request.name)
    if not valid:
        raise HTTPException(status_code=400, detail=error)
    bundle = rename_bundle(bundle_id, sanitize_input(request.name))
    return to_summary(bundle)


@app.delete("/bundles/{bundle_id}", status_code=204)
async def delete_bundle_endpoint(bundle_id: str):
    delete_bundle(bundle_id)
    logger.info("Deleted bundle %s", bundle_id)


@app.get("/bundles/{bundle_id}/overview", response_model=OverviewResponse)
async def overview_endpoint(bundle_id: str):
    bundle = get_bundle(bundle_id)

    t0 = perf_counter()
    summary = summarize_dataset(bundle.rows, bundle.file_size)
    profiles = profile_columns(bundle.rows)
    preview = preview_rows(bundle.rows)
    log_pipeline_timing("/overview", {"profiling": perf_counter() - t0})

    return OverviewResponse(
        bundle_id=bundle.id,
        summary=DatasetSummary(**summary),
        columns=[ColumnProfile(**p) for p in profiles],
        preview=preview,
        preview_placeholder=PREVIEW_PLACEHOLDER,
    )


@app.get("/bundles/{bundle_id}/chart-options", response_model=ChartOptionsResponse)
async def chart_options_endpoint(bundle_id: str):
    bundle = get_bundle(bundle_id)
    options = chart_options(bundle.rows)
    return ChartOptionsResponse(
        columns=options["columns"],
        numeric_columns=options["numeric_columns"],
        categorical_columns=options["categorical_columns"],
        chart_types=[ChartTypeOption(**o) for o in options["chart_types"]],
    )


@app.post("/bundles/{bundle_id}/chart", response_model=ChartResponse)
async def chart_endpoint(bundle_id: str, request: ChartRequest):
    bundle = get_bundle(bundle_id)
    spec = ChartSpec(
        chart_type=request.chart_type,
        x_column=request.x_column,
        y_column=request.y_column,
        color_column=request.color_column,
    )
    data = derive_chart_series(bundle.rows, spec)

    return ChartResponse(
        chart_type=request.chart_type,
        x_column=request.x_column,
        y_column=request.y_column,
        color_column=request.color_column,
        data=data,
        empty=not data,
        message=None if data else NO_DATA_MESSAGE,
    )


@app.get("/bundles/{bundle_id}/chat", response_model=ChatHistoryResponse)
async def chat_history_endpoint(bundle_id: str):
    bundle = get_bundle(bundle_id)
    return ChatHistoryResponse(
        bundle_id=bundle.id,
        messages=[ChatMessage(**m) for m in get_chat_history(bundle.id)],
    )


@app.post("/bundles/{bundle_id}/chat", response_model=ChatResponse)
async def chat_endpoint(bundle_id: str, request: ChatRequest):
    bundle = get_bundle(bundle_id)

    valid, error = validate_chat_message(request.message)
    if not valid:
        raise HTTPException(status_code=400, detail=error)

    if not os.getenv("OPENAI_API_KEY"):
        raise HTTPException(status_code=500, detail="OpenAI API key not configured.")

    message = request.message.strip()
    sample = prepare_data_sample(bundle.rows, limit=CHAT_SAMPLE_ROWS)
    bundle_info = build_bundle_info(bundle.name, bundle.rows)

    t0 = perf_counter()
    try:
        answer = request_analysis(
            message,
            sample,
            bundle_info,
            model=OPENAI_MODEL,
            client=get_openai_client(),
        )
    except ChatProviderError as e:
        logger.error("AI chat failed for bundle %s: %s", bundle.id, e)
        raise HTTPException(status_code=502, detail=str(e))
    log_pipeline_timing("/chat", {"llm_response": perf_counter() - t0})

    append_chat_message(bundle.id, "user", message)
    append_chat_message(bundle.id, "assistant", answer)
    return ChatResponse(response=answer)


@app.delete("/bundles/{bundle_id}/chat", status_code=204)
async def clear_chat_endpoint(bundle_id: str):
    bundle = get_bundle(bundle_id)
    clear_chat_history(bundle.id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
