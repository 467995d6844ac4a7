"""URL slug helpers for shops and pages."""

import re
from typing import Awaitable, Callable

# Basic Devanagari transliteration, applied before stripping non-word chars
_TRANSLITERATION = {
    "अ": "a", "आ": "aa", "इ": "i", "ई": "ii", "उ": "u", "ऊ": "uu",
    "ए": "e", "ऐ": "ai", "ओ": "o", "औ": "au",
    "क": "ka", "ख": "kha", "ग": "ga", "घ": "gha",
    "च": "cha", "छ": "chha", "ज": "ja", "झ": "jha",
    "ट": "ta", "ठ": "tha", "ड": "da", "ढ": "dha", "ण": "na",
    "त": "ta", "थ": "tha", "द": "da", "ध": "dha", "न": "na",
    "प": "pa", "फ": "pha", "ब": "ba", "भ": "bha", "म": "ma",
    "य": "ya", "र": "ra", "ल": "la", "व": "va",
    "श": "sha", "ष": "sha", "स": "sa", "ह": "ha",
}

MAX_NAME_LENGTH = 50


def text_to_slug(text: str) -> str:
    slug = text.lower().strip()
    slug = "".join(_TRANSLITERATION.get(ch, ch) for ch in slug)
    slug = re.sub(r"[^a-z0-9_\s-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    return slug.strip("-")


def generate_shop_slug(shop_name: str, shop_id: str) -> str:
    """`abc-store-507f1f77`: name slug (max 50 chars) + last 8 chars of the id."""
    name = text_to_slug(shop_name)[:MAX_NAME_LENGTH].strip("-")
    suffix = shop_id.replace("-", "")[-8:]
    return f"{name}-{suffix}" if name else suffix


async def next_copy_slug(
    base: str, exists: Callable[[str], Awaitable[bool]]
) -> str:
    """First free slug in the sequence base-copy, base-copy-1, base-copy-2, ..."""
    candidate = f"{base}-copy"
    counter = 1
    while await exists(candidate):
        candidate = f"{base}-copy-{counter}"
        counter += 1
    return candidate
