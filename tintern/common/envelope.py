"""
Explicit parsing of list/item response envelopes.

List endpoints answer either with a bare array or with `{<resource>: [...]}`.
Both are accepted and tagged; any third shape fails loudly.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from tintern.common.errors import EnvelopeError

BARE = "bare"
ENVELOPE = "envelope"


@dataclass
class ListEnvelope:
    """Normalized list response."""
    shape: str  # "bare" or "envelope"
    items: List[Any]
    key: Optional[str] = None


def normalize_list(payload: Any, keys: Sequence[str]) -> ListEnvelope:
    """Tag a list response as bare or enveloped, or raise EnvelopeError."""
    if isinstance(payload, list):
        return ListEnvelope(shape=BARE, items=payload)

    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return ListEnvelope(shape=ENVELOPE, items=value, key=key)

    raise EnvelopeError(keys, payload)


def unwrap_item(payload: Any, keys: Sequence[str]) -> Dict[str, Any]:
    """
    Extract a single object that may be wrapped as `{<resource>: {...}}`.

    A non-object payload (e.g. an empty 204 body) yields an empty dict so the
    caller keeps its locally-entered fields.
    """
    if not isinstance(payload, dict):
        return {}
    for key in keys:
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return payload
