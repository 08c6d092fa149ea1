"""Advanced boolean filters over decoded transactions.

An `AdvancedFilter` combines:
- transaction-level guards (`tx_hash`, `numeric_range`)
- nested `or_filters` (any must hold) and `and_filters` (all must hold)
- an `event_type` restriction selecting candidate events
- attribute conditions: `any_of`, `all_of`, `none_of`
- a `message_type` restriction on candidate `message` events' `action`

The engine is independent from the basic tiers; a transaction "matches any"
when at least one registered filter holds.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from tmfind.constants import MESSAGE_EVENT, UNNAMED_FILTER
from tmfind.core.models import DecodedEvent, DecodedTransaction

LOGGER = logging.getLogger(__name__)


class MatchType(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    REGEX = "regex"


@dataclass(frozen=True)
class AttributeCondition:
    """Test one attribute key of an event.

    `value=None` turns the condition into a key-existence check.
    """

    key: str
    value: tuple[str, ...] | None = None
    match_type: MatchType = MatchType.EXACT
    negated: bool = False

    @classmethod
    def of(
        cls,
        key: str,
        value: str | Iterable[str] | None = None,
        match_type: MatchType | str = MatchType.EXACT,
        negated: bool = False,
    ) -> AttributeCondition:
        if isinstance(value, str):
            values: tuple[str, ...] | None = (value,)
        elif value is None:
            values = None
        else:
            values = tuple(value)
        return cls(key=key, value=values, match_type=MatchType(match_type), negated=negated)


@dataclass(frozen=True)
class NumericRange:
    """Inclusive bounds on a numeric transaction field (``height``, ``gas_used`` ...)."""

    field: str
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class AdvancedFilter:
    name: str = UNNAMED_FILTER
    event_type: frozenset[str] | None = None
    any_of: tuple[AttributeCondition, ...] = ()
    all_of: tuple[AttributeCondition, ...] = ()
    none_of: tuple[AttributeCondition, ...] = ()
    message_type: tuple[str, ...] | None = None
    or_filters: tuple[AdvancedFilter, ...] = ()
    and_filters: tuple[AdvancedFilter, ...] = ()
    tx_hash: frozenset[str] | None = None
    numeric_range: NumericRange | None = None


@dataclass(slots=True, frozen=True)
class AdvancedFilterResult:
    passed: bool
    matched: tuple[str, ...] = ()


# accepted spellings for NumericRange.field
_RANGE_FIELDS = {
    "height": "height",
    "gas_wanted": "gas_wanted",
    "gasWanted": "gas_wanted",
    "gas_used": "gas_used",
    "gasUsed": "gas_used",
}


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def _compare(event_value: str, cond_value: str, match_type: MatchType) -> bool:
    match match_type:
        case MatchType.CONTAINS:
            return cond_value in event_value
        case MatchType.STARTS_WITH:
            return event_value.startswith(cond_value)
        case MatchType.ENDS_WITH:
            return event_value.endswith(cond_value)
        case MatchType.REGEX:
            try:
                return _compile(cond_value).search(event_value) is not None
            except re.error as e:
                LOGGER.error("invalid regex pattern %r: %s", cond_value, e)
                return False
    return event_value == cond_value


def matches_condition(event: DecodedEvent, condition: AttributeCondition) -> bool:
    """Evaluate one condition against one event."""
    event_values = event.attributes.get(condition.key)
    if not event_values:
        return condition.negated
    if condition.value is None:
        return not condition.negated
    hit = any(
        _compare(ev, cv, condition.match_type) for ev in event_values for cv in condition.value
    )
    return not hit if condition.negated else hit


def _in_range(tx: DecodedTransaction, rng: NumericRange) -> bool:
    attr = _RANGE_FIELDS.get(rng.field)
    raw = getattr(tx, attr, None) if attr else None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    if rng.min is not None and value < rng.min:
        return False
    if rng.max is not None and value > rng.max:
        return False
    return True


def _candidate_events(tx: DecodedTransaction, flt: AdvancedFilter) -> list[DecodedEvent]:
    if not flt.event_type:
        return list(tx.events)
    return [ev for ev in tx.events if ev.type in flt.event_type]


def matches_filter(tx: DecodedTransaction, flt: AdvancedFilter) -> bool:
    """Evaluate one filter (recursively) against a transaction."""
    if flt.tx_hash is not None and tx.tx_hash not in flt.tx_hash:
        return False
    if flt.numeric_range is not None and not _in_range(tx, flt.numeric_range):
        return False

    if flt.or_filters and not any(matches_filter(tx, sub) for sub in flt.or_filters):
        return False
    if flt.and_filters and not all(matches_filter(tx, sub) for sub in flt.and_filters):
        return False

    events = _candidate_events(tx, flt)
    if not events:
        return False

    if flt.any_of and not any(matches_condition(ev, c) for ev in events for c in flt.any_of):
        return False
    if flt.all_of and not all(any(matches_condition(ev, c) for ev in events) for c in flt.all_of):
        return False
    if flt.none_of and any(matches_condition(ev, c) for ev in events for c in flt.none_of):
        return False

    if flt.message_type:
        messages = [ev for ev in events if ev.type == MESSAGE_EVENT]
        if not any(mt in action for ev in messages for action in ev.values("action") for mt in flt.message_type):
            return False

    return True


class AdvancedFilterEngine:
    """Holds an immutable tuple of filters; mutators swap the whole tuple."""

    def __init__(self, filters: Sequence[AdvancedFilter] = ()) -> None:
        self._filters: tuple[AdvancedFilter, ...] = tuple(filters)

    @property
    def filters(self) -> tuple[AdvancedFilter, ...]:
        return self._filters

    def add_filter(self, flt: AdvancedFilter) -> None:
        self._filters = (*self._filters, flt)

    def clear_filters(self) -> None:
        self._filters = ()

    def matches_any(self, tx: DecodedTransaction) -> bool:
        if not self._filters:
            return True
        return any(matches_filter(tx, f) for f in self._filters)

    def apply(self, tx: DecodedTransaction) -> AdvancedFilterResult:
        """Names of the filters that hold; passes vacuously when none are registered."""
        filters = self._filters
        if not filters:
            return AdvancedFilterResult(passed=True)
        names = tuple(f.name for f in filters if matches_filter(tx, f))
        return AdvancedFilterResult(passed=bool(names), matched=names)
