import logging
from types import SimpleNamespace

import pytest

from tmfind.core.models import DecodedEvent
from tmfind.filters.advanced import (
    AdvancedFilter,
    AdvancedFilterEngine,
    AttributeCondition,
    MatchType,
    NumericRange,
    matches_condition,
    matches_filter,
)


@pytest.fixture
def event() -> DecodedEvent:
    return DecodedEvent(type="wasm", attributes={"action": ["swap_exact"], "memo": ["gm frens"]})


@pytest.fixture
def swap_tx(make_tx, addrs: SimpleNamespace):
    return make_tx(
        [
            ("message", {"action": "/cosmwasm.wasm.v1.MsgExecuteContract", "sender": addrs.delegator}),
            ("wasm", {"_contract_address": addrs.contract, "action": "swap", "offer_amount": "1000"}),
            ("transfer", {"sender": addrs.delegator, "recipient": addrs.recipient, "amount": "1000uatom"}),
        ],
        height="500",
        gas_used="90000",
    )


@pytest.mark.parametrize(
    ("match_type", "value", "expected"),
    [
        (MatchType.EXACT, "swap_exact", True),
        (MatchType.EXACT, "swap", False),
        (MatchType.CONTAINS, "p_ex", True),
        (MatchType.STARTS_WITH, "swap", True),
        (MatchType.STARTS_WITH, "exact", False),
        (MatchType.ENDS_WITH, "exact", True),
        (MatchType.REGEX, r"^swap_\w+$", True),
        (MatchType.REGEX, r"^send", False),
    ],
)
def test_match_types(event: DecodedEvent, match_type: MatchType, value: str, expected: bool) -> None:
    assert matches_condition(event, AttributeCondition.of("action", value, match_type)) is expected


def test_values_are_ored(event: DecodedEvent) -> None:
    cond = AttributeCondition.of("action", ["nope", "swap_exact"])

    assert matches_condition(event, cond)


def test_invalid_regex_is_non_matching(event: DecodedEvent, caplog: pytest.LogCaptureFixture) -> None:
    cond = AttributeCondition.of("action", "([unclosed", MatchType.REGEX)

    with caplog.at_level(logging.ERROR):
        assert not matches_condition(event, cond)

    assert "invalid regex" in caplog.text


def test_negation_on_missing_and_present_keys(event: DecodedEvent) -> None:
    missing = DecodedEvent(type="wasm", attributes={"action": ["swap"]})
    negated = AttributeCondition.of("memo", negated=True)

    assert matches_condition(missing, negated)
    assert not matches_condition(event, negated)
    assert matches_condition(event, AttributeCondition.of("memo"))
    assert not matches_condition(missing, AttributeCondition.of("memo"))


@pytest.mark.parametrize("value", ["gm frens", "nope"])
def test_negated_value_is_complement(event: DecodedEvent, value: str) -> None:
    plain = AttributeCondition.of("memo", value)
    negated = AttributeCondition.of("memo", value, negated=True)

    assert matches_condition(event, negated) is not matches_condition(event, plain)


def test_event_type_restricts_candidates(swap_tx) -> None:
    cond = (AttributeCondition.of("action", "swap"),)

    assert matches_filter(swap_tx, AdvancedFilter(event_type=frozenset({"wasm"}), any_of=cond))
    assert not matches_filter(swap_tx, AdvancedFilter(event_type=frozenset({"transfer"}), any_of=cond))
    assert not matches_filter(swap_tx, AdvancedFilter(event_type=frozenset({"unbond"})))


def test_all_of_may_span_events(swap_tx, addrs: SimpleNamespace) -> None:
    flt = AdvancedFilter(
        all_of=(
            AttributeCondition.of("action", "swap"),
            AttributeCondition.of("recipient", addrs.recipient),
        )
    )

    assert matches_filter(swap_tx, flt)


def test_none_of(swap_tx) -> None:
    assert not matches_filter(swap_tx, AdvancedFilter(none_of=(AttributeCondition.of("action", "swap"),)))
    assert matches_filter(swap_tx, AdvancedFilter(none_of=(AttributeCondition.of("action", "burn"),)))


def test_message_type(swap_tx) -> None:
    assert matches_filter(swap_tx, AdvancedFilter(message_type=("MsgExecuteContract",)))
    assert not matches_filter(swap_tx, AdvancedFilter(message_type=("MsgSend",)))


def test_tx_hash_and_numeric_range(swap_tx, addrs: SimpleNamespace) -> None:
    assert matches_filter(swap_tx, AdvancedFilter(tx_hash=frozenset({addrs.tx_hash})))
    assert not matches_filter(swap_tx, AdvancedFilter(tx_hash=frozenset({"OTHER"})))
    assert not matches_filter(swap_tx, AdvancedFilter(tx_hash=frozenset()))
    assert matches_filter(swap_tx, AdvancedFilter(numeric_range=NumericRange("height", 100, 500)))
    assert not matches_filter(swap_tx, AdvancedFilter(numeric_range=NumericRange("gasUsed", max=50000)))
    assert not matches_filter(swap_tx, AdvancedFilter(numeric_range=NumericRange("fee", min=0)))


def test_nested_or_and(swap_tx) -> None:
    swap = AdvancedFilter(any_of=(AttributeCondition.of("action", "swap"),))
    burn = AdvancedFilter(any_of=(AttributeCondition.of("action", "burn"),))

    assert matches_filter(swap_tx, AdvancedFilter(or_filters=(burn, swap)))
    assert not matches_filter(swap_tx, AdvancedFilter(and_filters=(burn, swap)))


def test_engine_reports_matching_names(swap_tx) -> None:
    engine = AdvancedFilterEngine()
    assert engine.apply(swap_tx).passed
    assert engine.matches_any(swap_tx)

    engine.add_filter(AdvancedFilter(name="swaps", any_of=(AttributeCondition.of("action", "swap"),)))
    engine.add_filter(AdvancedFilter(name="burns", any_of=(AttributeCondition.of("action", "burn"),)))
    result = engine.apply(swap_tx)

    assert result.passed
    assert result.matched == ("swaps",)

    engine.clear_filters()
    assert engine.filters == ()
