from __future__ import annotations

import json
import logging

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


def decode_id_list(raw: str | list | None, *, context: str = "") -> list[str]:
    """Decode a JSON-encoded id array, degrading to an empty list on bad data."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw]
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to decode id list %s: %r", context, raw)
        return []
    if not isinstance(parsed, list):
        logger.warning("Stored id list %s is not an array: %r", context, raw)
        return []
    return [str(item) for item in parsed]


class JSONIdList(TypeDecorator):
    """Ordered list of identifiers persisted as a JSON array in a single text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "[]"
        return json.dumps([str(item) for item in value])

    def process_result_value(self, value, dialect):
        return decode_id_list(value, context="column")
