import base64
from types import SimpleNamespace

import pytest

from tmfind.decoding.codec import AttributeCodec


@pytest.fixture
def codec() -> AttributeCodec:
    return AttributeCodec("cosmos")


def test_is_address_accepts_account_and_validator_forms(codec: AttributeCodec, addrs: SimpleNamespace) -> None:
    assert codec.is_address(addrs.delegator)
    assert codec.is_address(addrs.validator)
    assert codec.is_address(addrs.contract)


def test_is_address_rejects_other_prefix_and_short_values(codec: AttributeCodec, addrs: SimpleNamespace) -> None:
    assert not codec.is_address(addrs.osmo)
    assert not codec.is_address("cosmos1abc")
    assert not codec.is_address("")


def test_prefix_is_configuration(addrs: SimpleNamespace) -> None:
    osmo = AttributeCodec("osmo")
    assert osmo.is_address(addrs.osmo)
    assert not osmo.is_address(addrs.delegator)


@pytest.mark.parametrize("value", ["", "hello world", "c2VuZGVy", "transfer.amount", "100uatom"])
def test_is_likely_encoded_rejects_plain_and_short_values(codec: AttributeCodec, value: str) -> None:
    assert not codec.is_likely_encoded(value)


def test_is_likely_encoded_accepts_base64_text(codec: AttributeCodec, encode) -> None:
    assert codec.is_likely_encoded(encode("transfer.amount"))
    assert codec.is_likely_encoded(encode("recipient"))


def test_is_likely_encoded_rejects_binary_payloads(codec: AttributeCodec) -> None:
    control = base64.b64encode(bytes(range(9))).decode()
    not_utf8 = base64.b64encode(b"\xff\xfe\xfd\xfc\xfb\xfa\xf9").decode()
    assert not codec.is_likely_encoded(control)
    assert not codec.is_likely_encoded(not_utf8)


def test_is_likely_encoded_rejects_plain_addresses(codec: AttributeCodec, addrs: SimpleNamespace) -> None:
    assert not codec.is_likely_encoded(addrs.delegator)
    assert not codec.is_likely_encoded(addrs.validator)


def test_decode_tolerates_missing_padding(codec: AttributeCodec) -> None:
    assert codec.decode("aGVsbG8gd29ybGQ") == "hello world"


def test_decode_returns_input_on_failure(codec: AttributeCodec) -> None:
    assert codec.decode("not base64!") == "not base64!"
    assert codec.decode("//79/Pv6+Q==") == "//79/Pv6+Q=="


def test_address_aware_keeps_plain_address(codec: AttributeCodec, addrs: SimpleNamespace) -> None:
    assert codec.decode_address_aware("sender", addrs.delegator) == addrs.delegator


def test_address_aware_decodes_encoded_address(codec: AttributeCodec, addrs: SimpleNamespace, encode) -> None:
    assert codec.decode_address_aware("sender", encode(addrs.delegator)) == addrs.delegator
    assert codec.decode_address_aware("validator", encode(addrs.validator)) == addrs.validator


def test_address_aware_leaves_non_address_payloads_encoded(codec: AttributeCodec, addrs: SimpleNamespace, encode) -> None:
    memo = encode("hello world!")
    assert codec.decode_address_aware("sender", memo) == memo
    # other chain's address is not an address of this codec
    foreign = encode(addrs.osmo)
    assert codec.decode_address_aware("sender", foreign) == foreign
