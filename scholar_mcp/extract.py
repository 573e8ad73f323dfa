# scholar_mcp/extract.py -- Shared field-extraction helpers
#
# Used by every record extractor. None of these raise on malformed input.

import logging
import re
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WS = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"[^\d]")
_FIRST_NUMBER = re.compile(r"\d[\d,]*")


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs (newlines included) to one space and trim."""
    if not text:
        return ""
    return _WS.sub(" ", text).strip()


def parse_int(text: Optional[str]) -> Optional[int]:
    """Digits of text with everything else removed; None when there are none."""
    if not text:
        return None
    digits = _NON_DIGIT.sub("", text)
    return int(digits) if digits else None


def parse_count(text: Optional[str]) -> Optional[int]:
    """First number in a sentence such as 'Total: 1,234 results in 0.2s'."""
    if not text:
        return None
    m = _FIRST_NUMBER.search(text)
    return int(m.group(0).replace(",", "")) if m else None


def first_of(*attempts: Callable[[], Optional[T]]) -> Optional[T]:
    """Run extraction attempts in order; the first non-empty result wins.

    An attempt that raises counts as empty so one broken fragment only
    costs that attempt.
    """
    for attempt in attempts:
        try:
            value = attempt()
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.debug("extraction attempt failed: %s", e)
            continue
        if value not in (None, ""):
            return value
    return None
