"""
TourStack Backend — Shared Column Types
=========================================

What:  Column types and defaults used by every model.
Why:   Tours, stops, templates and media keep structured values (localized
       titles, content blocks, custom field definitions) in TEXT columns.
       Encoding and decoding happens here, once, so services and routes
       only ever handle dicts and lists.
How:   SQLAlchemy TypeDecorators that json.dumps on bind and json.loads on
       every result row.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JSONText(TypeDecorator):
    """
    Stores any JSON-serializable value as TEXT.

    None stays NULL in both directions. Non-ASCII text (localized titles)
    is stored as-is rather than escaped.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value: Optional[str], dialect) -> Any:
        if value is None:
            return None
        return json.loads(value)


class FlexibleJSONText(TypeDecorator):
    """
    TEXT column holding either a plain string or a JSON object.

    Stop images started out as bare URLs and later became objects
    ({"url", "alt", "caption", ...}); both shapes are still on disk.
    Strings are stored verbatim, anything else as JSON. On read, text that
    looks like a JSON object or array is decoded; anything else is
    returned unchanged.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value: Optional[str], dialect) -> Any:
        if value is None or not value.startswith(("{", "[")):
            return value
        try:
            return json.loads(value)
        except ValueError:
            return value
