"""
Bundle Insights Backend - Configuration
Environment-driven settings, loaded once at import
"""

import os

from dotenv import load_dotenv

load_dotenv()

API_VERSION = "1.0.0"
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
CHAT_SAMPLE_ROWS = int(os.getenv("CHAT_SAMPLE_ROWS", "50"))
MAX_BUNDLES = int(os.getenv("MAX_BUNDLES", "25"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]
