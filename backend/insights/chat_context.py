"""
Bundle Insights - Chat Context Module
Redacted data sampling and LLM analysis requests for bundle chat
"""

import json
import os
import re
from typing import Optional

from openai import OpenAI

from config import CHAT_SAMPLE_ROWS

PROMPT_SAMPLE_ROWS = 5
REDACTED_VALUE = "[REDACTED]"
SENSITIVE_COLUMN_LABEL = "[SENSITIVE_COLUMN]"
SENSITIVE_COLUMN_PATTERN = re.compile(
    r"^(email|phone|ssn|social|address|name|id|password|key|token)$", re.IGNORECASE
)
FALLBACK_RESPONSE = "Sorry, I could not generate a response."

# Client initialized lazily to avoid import-time side effects
_client: Optional[OpenAI] = None


class ChatProviderError(Exception):
    """The LLM provider failed to answer"""


def get_openai_client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
    return _client


def is_sensitive_column(column: str) -> bool:
    return bool(SENSITIVE_COLUMN_PATTERN.match(column))


def redact_columns(columns: list[str]) -> list[str]:
    return [SENSITIVE_COLUMN_LABEL if is_sensitive_column(c) else c for c in columns]


def prepare_data_sample(rows: list[dict], limit: int = CHAT_SAMPLE_ROWS) -> list[dict]:
    """First `limit` rows with values of sensitive columns replaced"""
    sample = []
    for row in rows[:limit]:
        sample.append({
            key: REDACTED_VALUE if is_sensitive_column(key) else value
            for key, value in row.items()
        })
    return sample


def build_bundle_info(name: str, rows: list[dict]) -> dict:
    columns = list(rows[0].keys()) if rows else []
    return {
        "name": name,
        "total_rows": len(rows),
        "columns": redact_columns(columns),
    }


def build_analysis_prompt(message: str, sample: list[dict], bundle_info: dict) -> str:
    return f"""Dataset Information:
- Name: {bundle_info['name']}
- Total Rows: {bundle_info['total_rows']}
- Columns: {', '.join(bundle_info['columns'])}

Sample Data (first few rows):
{json.dumps(sample[:PROMPT_SAMPLE_ROWS], indent=2)}

You are a data analysis expert. Answer the user's question about this dataset with insights, patterns, and actionable recommendations. Be specific and provide concrete analysis based on the data provided.

User Question: {message}"""


def request_analysis(
    message: str,
    sample: list[dict],
    bundle_info: dict,
    model: str = "gpt-4o-mini",
    client: Optional[OpenAI] = None,
) -> str:
    """Forward the question and data sample to the LLM and return its text"""
    client = client or get_openai_client()
    prompt = build_analysis_prompt(message, sample, bundle_info)

    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": "You are a data analyst. Be concise and concrete."},
                {"role": "user", "content": prompt},
            ],
            max_tokens=800,
            temperature=0.3,
        )
    except Exception as e:
        raise ChatProviderError(str(e) or "Failed to get response from the AI provider") from e

    content = resp.choices[0].message.content if resp.choices else None
    return content.strip() if content and content.strip() else FALLBACK_RESPONSE
