"""
TourStack Backend — Slugs, Short Codes and Tokens

Helpers for the human-readable parts of visitor URLs:
    /visitor/tour/<tour slug>/stop/<stop slug>?t=<token>
and the short code printed under each QR code.
"""

import re
import secrets
import string
from typing import Any, Awaitable, Callable, Dict, Optional

MAX_SLUG_LENGTH = 50

# No 0/O or 1/I: short codes are read aloud and typed by visitors
SHORT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SHORT_CODE_LENGTH = 6

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 8


def slugify(text: str) -> str:
    """
    "The Great Hall: East Wing!" -> "the-great-hall-east-wing"

    Lowercase, drop anything outside [a-z0-9 whitespace -], whitespace runs
    to a hyphen, collapse hyphens, cut to 50 characters, then trim hyphens.
    May return "" (e.g. for titles written only in non-Latin scripts).
    """
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug[:MAX_SLUG_LENGTH]
    return slug.strip("-")


def title_text(title: Optional[Dict[str, Any]], fallback: str) -> str:
    """English title if present, otherwise the first non-empty localization."""
    if not title:
        return fallback
    if title.get("en"):
        return str(title["en"])
    for value in title.values():
        if value:
            return str(value)
    return fallback


async def unique_slug(base: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """
    First of base, base-1, base-2, ... for which `exists` is False.
    An empty base becomes "untitled".
    """
    base = base or "untitled"
    slug = base
    counter = 1
    while await exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def short_code() -> str:
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(SHORT_CODE_LENGTH))


def tracking_token() -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))
