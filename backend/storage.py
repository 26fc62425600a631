"""
Bundle Insights Backend - Bundle Storage
In-memory bundle and chat history management with capacity eviction
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from config import MAX_BUNDLES

logger = logging.getLogger(__name__)


class BundleInfo:
    """Container for an uploaded CSV bundle with metadata"""

    def __init__(
        self,
        name: str,
        file_name: str,
        file_size: int,
        rows: list[dict],
        columns: list[str],
    ):
        self.id = str(uuid.uuid4())
        self.name = name
        self.file_name = file_name
        self.file_size = file_size
        self.rows = rows
        self.columns = columns
        self.created_at = datetime.now()
        self.touch()

    def touch(self):
        """Update last accessed time"""
        self.last_accessed = datetime.now()

    @property
    def total_rows(self) -> int:
        return len(self.rows)


# Global bundle storage
BUNDLES: dict[str, BundleInfo] = {}
CHAT_HISTORY: dict[str, list[dict]] = {}


def get_bundle(bundle_id: str) -> BundleInfo:
    """Retrieve bundle by ID"""
    if bundle_id not in BUNDLES:
        raise HTTPException(status_code=404, detail="Bundle not found")
    bundle = BUNDLES[bundle_id]
    bundle.touch()
    return bundle


def store_bundle(bundle: BundleInfo, max_bundles: Optional[int] = None) -> str:
    """Store bundle and return its ID"""
    capacity = max_bundles if max_bundles is not None else MAX_BUNDLES

    # Evict least recently used if at capacity
    while BUNDLES and len(BUNDLES) >= capacity:
        oldest_id = min(BUNDLES.keys(), key=lambda k: BUNDLES[k].last_accessed)
        logger.info("Evicting bundle %s to stay under %d bundles", oldest_id, capacity)
        delete_bundle(oldest_id)

    BUNDLES[bundle.id] = bundle
    CHAT_HISTORY[bundle.id] = []
    return bundle.id


def list_bundles() -> list[BundleInfo]:
    """All bundles, newest first"""
    return sorted(BUNDLES.values(), key=lambda b: b.created_at, reverse=True)


def rename_bundle(bundle_id: str, new_name: str) -> BundleInfo:
    bundle = get_bundle(bundle_id)
    bundle.name = new_name
    return bundle


def delete_bundle(bundle_id: str) -> None:
    if bundle_id not in BUNDLES:
        raise HTTPException(status_code=404, detail="Bundle not found")
    del BUNDLES[bundle_id]
    CHAT_HISTORY.pop(bundle_id, None)


def append_chat_message(bundle_id: str, role: str, content: str) -> dict:
    message = {
        "id": str(uuid.uuid4()),
        "role": role,
        "content": content,
        "created_at": datetime.now(),
    }
    CHAT_HISTORY.setdefault(bundle_id, []).append(message)
    return message


def get_chat_history(bundle_id: str) -> list[dict]:
    return list(CHAT_HISTORY.get(bundle_id, []))


def clear_chat_history(bundle_id: str) -> None:
    CHAT_HISTORY[bundle_id] = []
