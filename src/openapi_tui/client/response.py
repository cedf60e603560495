"""Response bridge -- maps :class:`httpx.Response` to stored records.

After a dialed request completes, :func:`record_from_response` turns the
response into a :class:`~openapi_tui.models.ResponseRecord`, and the
dispatcher upserts it into the shared :class:`ResponseStore` on the next tick.
Only the latest record per operation key is kept.
"""

from __future__ import annotations

import json
from typing import Optional

import httpx

from openapi_tui.models import ResponseRecord


class ResponseStore:
    """Latest :class:`~openapi_tui.models.ResponseRecord` per operation key."""

    def __init__(self) -> None:
        self._records: dict[str, ResponseRecord] = {}

    def upsert(self, key: str, record: ResponseRecord) -> None:
        """Insert or replace the record for *key*."""
        self._records[key] = record

    def get(self, key: str) -> Optional[ResponseRecord]:
        return self._records.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)


def record_from_response(response: httpx.Response, elapsed_ms: float = 0.0) -> ResponseRecord:
    """Build a record from a completed response.

    The body is decoded strictly with the declared charset (UTF-8 when none
    is declared). JSON bodies are pretty-printed. A body that cannot be
    decoded yields a failed record that still carries the status and headers.

    Args:
        response: A response whose content has been read.
        elapsed_ms: Wall-clock duration of the exchange.
    """
    base = ResponseRecord(
        status=response.status_code,
        reason=response.reason_phrase,
        protocol_version=response.http_version,
        headers=list(response.headers.multi_items()),
        content_length=_content_length(response),
        elapsed_ms=elapsed_ms,
    )

    encoding = response.charset_encoding or "utf-8"
    try:
        text = response.content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        return base.model_copy(update={"error": f"Undecodable response body: {exc}"})

    return base.model_copy(update={"body": _pretty(text, response.headers.get("content-type", ""))})


def failed_record(message: str, elapsed_ms: float = 0.0) -> ResponseRecord:
    """A record for a request that produced no response at all."""
    return ResponseRecord(error=message, elapsed_ms=elapsed_ms)


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("content-length")
    if value is not None and value.isdigit():
        return int(value)
    return None


def _pretty(text: str, content_type: str) -> str:
    """Indent JSON bodies; anything else is returned unchanged."""
    if "json" not in content_type or not text.strip():
        return text
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except json.JSONDecodeError:
        return text
