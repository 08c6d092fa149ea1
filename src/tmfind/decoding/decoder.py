"""Event decoder: raw Tendermint events -> `DecodedEvent` with provenance.

Keys and values are checked independently: a producer may pre-decode one and
not the other. Address-bearing keys get a second, address-aware pass over the
*raw* value so an already-decoded address is never decoded twice.
"""

from __future__ import annotations

from collections.abc import Iterable

from tmfind.core.models import DecodedAttribute, DecodedEvent, RawAttribute, RawEvent
from tmfind.decoding.codec import AttributeCodec


class EventDecoder:
    """Apply an `AttributeCodec` to every attribute of every event."""

    def __init__(self, codec: AttributeCodec) -> None:
        self.codec = codec

    def decode_attribute(self, attr: RawAttribute) -> DecodedAttribute:
        codec = self.codec
        key = codec.decode(attr.key) if codec.is_likely_encoded(attr.key) else attr.key
        if codec.is_address_key(key):
            value = codec.decode_address_aware(key, attr.value)
        elif codec.is_likely_encoded(attr.value):
            value = codec.decode(attr.value)
        else:
            value = attr.value
        return DecodedAttribute(
            raw_key=attr.key,
            raw_value=attr.value,
            key=key,
            value=value,
            index=attr.index,
        )

    def decode_event(self, event: RawEvent) -> DecodedEvent:
        rows = tuple(self.decode_attribute(a) for a in event.attributes)
        return DecodedEvent.from_provenance(event.type, rows)

    def decode(self, events: Iterable[RawEvent]) -> list[DecodedEvent]:
        """Decode all events, preserving event order."""
        return [self.decode_event(ev) for ev in events]
