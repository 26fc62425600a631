"""
Bundle Insights - Validation Module
Input sanitizing for bundle names and chat messages
"""

import re
from typing import Optional

MAX_INPUT_LENGTH = 1000
MAX_BUNDLE_NAME_LENGTH = 100
MAX_CHAT_MESSAGE_LENGTH = 2000
_DANGEROUS_NAME_CHARS = re.compile(r"[<>'\"\\]")


def sanitize_input(text: str) -> str:
    """Drop angle brackets, trim, and cap the length"""
    return re.sub(r"[<>]", "", text).strip()[:MAX_INPUT_LENGTH]


def validate_bundle_name(name: str) -> tuple[bool, Optional[str]]:
    sanitized = sanitize_input(name or "")
    if not sanitized:
        return False, "Bundle name is required"

    if len(sanitized) > MAX_BUNDLE_NAME_LENGTH:
        return False, "Bundle name must be between 1 and 100 characters"

    if _DANGEROUS_NAME_CHARS.search(sanitized):
        return False, "Bundle name contains invalid characters"

    return True, None


def validate_chat_message(message: str) -> tuple[bool, Optional[str]]:
    sanitized = sanitize_input(message or "")
    if not sanitized:
        return False, "Message cannot be empty"

    # sanitize_input caps at 1000 chars, so check the raw length
    if len(message.strip()) > MAX_CHAT_MESSAGE_LENGTH:
        return False, "Message is too long (max 2000 characters)"

    return True, None
