"""
Whitespace normalization for extracted text fields.
"""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """
    Collapse whitespace runs to a single space and trim.

    Idempotent: normalize_text(normalize_text(x)) == normalize_text(x).
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()
