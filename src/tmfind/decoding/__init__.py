"""Message envelope extraction and attribute decoding.

This package provides:
- `AttributeCodec`: conditional base64 decoding with address awareness
- `extract_envelope` and message triage helpers
- `EventDecoder`: raw events -> `DecodedEvent` with provenance
"""

from tmfind.decoding.codec import AttributeCodec
from tmfind.decoding.decoder import EventDecoder
from tmfind.decoding.envelope import (
    contains_unwanted_events,
    extract_envelope,
    flat_events_to_raw,
    is_subscription_confirmation,
    parse_raw_events,
)

__all__ = [
    "AttributeCodec",
    "EventDecoder",
    "contains_unwanted_events",
    "extract_envelope",
    "flat_events_to_raw",
    "is_subscription_confirmation",
    "parse_raw_events",
]
