from types import SimpleNamespace

import pytest

from tmfind.core.models import RawAttribute, RawEvent
from tmfind.decoding.codec import AttributeCodec
from tmfind.decoding.decoder import EventDecoder


@pytest.fixture
def decoder() -> EventDecoder:
    return EventDecoder(AttributeCodec("cosmos"))


def test_plain_attributes_pass_through(decoder: EventDecoder, addrs: SimpleNamespace) -> None:
    ev = RawEvent(
        "transfer",
        (RawAttribute("recipient", addrs.recipient, True), RawAttribute("amount", "100uatom", True)),
    )

    decoded = decoder.decode_event(ev)

    assert decoded.type == "transfer"
    assert decoded.attributes == {"recipient": [addrs.recipient], "amount": ["100uatom"]}
    row = decoded.provenance[0]
    assert (row.raw_key, row.raw_value) == (row.key, row.value)
    assert row.index is True


def test_encoded_key_and_address_value(decoder: EventDecoder, addrs: SimpleNamespace, encode) -> None:
    ev = RawEvent("transfer", (RawAttribute(encode("recipient"), encode(addrs.recipient)),))

    decoded = decoder.decode_event(ev)

    assert decoded.first("recipient") == addrs.recipient
    row = decoded.provenance[0]
    assert row.raw_key == encode("recipient")
    assert row.raw_value == encode(addrs.recipient)


def test_encoded_text_value_under_plain_key(decoder: EventDecoder, encode) -> None:
    ev = RawEvent("wasm", (RawAttribute("memo_text", encode("hello world!")),))

    assert decoder.decode_event(ev).first("memo_text") == "hello world!"


def test_address_key_only_decodes_to_addresses(decoder: EventDecoder, encode) -> None:
    payload = encode("hello world!")
    ev = RawEvent("message", (RawAttribute("sender", payload),))

    assert decoder.decode_event(ev).first("sender") == payload


def test_short_encoded_key_is_left_alone(decoder: EventDecoder) -> None:
    # "c2VuZGVy" is base64 of "sender" but below the length threshold
    ev = RawEvent("message", (RawAttribute("c2VuZGVy", "x"),))

    assert list(decoder.decode_event(ev).attributes) == ["c2VuZGVy"]


def test_duplicates_and_key_order_preserved(decoder: EventDecoder) -> None:
    ev = RawEvent(
        "transfer",
        (
            RawAttribute("amount", "1uatom"),
            RawAttribute("sender", "a"),
            RawAttribute("amount", "1uatom"),
        ),
    )

    decoded = decoder.decode_event(ev)

    assert list(decoded.attributes) == ["amount", "sender"]
    assert decoded.values("amount") == ["1uatom", "1uatom"]
    assert len(decoded.provenance) == 3


def test_decode_preserves_event_order(decoder: EventDecoder) -> None:
    events = [RawEvent("a"), RawEvent("b"), RawEvent("c")]

    assert [e.type for e in decoder.decode(events)] == ["a", "b", "c"]
