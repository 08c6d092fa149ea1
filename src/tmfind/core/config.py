from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from tmfind.constants import DEFAULT_ENDPOINTS, DEFAULT_SUBSCRIPTION_QUERY, UNWANTED_EVENT_KEYS


class ChainType(str, Enum):
    GENERIC = "generic"
    COSMOS = "cosmos"
    OSMOSIS = "osmosis"
    SEI = "sei"
    JUNO = "juno"
    TERRA = "terra"

    @classmethod
    def parse(cls, value: str | ChainType | None) -> ChainType:
        """Map a chain identifier to a ChainType; unknown identifiers become GENERIC."""
        if isinstance(value, ChainType):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.GENERIC


@dataclass(frozen=True)
class ChainInfo:
    """Per-chain constants the codec and transformers need."""

    chain_id: str
    bech32_prefix: str
    chain_type: ChainType
    denom: str
    display_denom: str | None = None


CHAIN_DEFAULTS: dict[ChainType, ChainInfo] = {
    ChainType.GENERIC: ChainInfo("generic", "cosmos", ChainType.GENERIC, "uatom", "ATOM"),
    ChainType.COSMOS: ChainInfo("cosmoshub-4", "cosmos", ChainType.COSMOS, "uatom", "ATOM"),
    ChainType.OSMOSIS: ChainInfo("osmosis-1", "osmo", ChainType.OSMOSIS, "uosmo", "OSMO"),
    ChainType.SEI: ChainInfo("sei-chain", "sei", ChainType.SEI, "usei", "SEI"),
    ChainType.JUNO: ChainInfo("juno-1", "juno", ChainType.JUNO, "ujuno", "JUNO"),
    ChainType.TERRA: ChainInfo("phoenix-1", "terra", ChainType.TERRA, "uluna", "LUNA"),
}


def chain_info_for(chain_type: ChainType, **overrides: str | None) -> ChainInfo:
    """Default ChainInfo for `chain_type` with non-None overrides applied."""
    base = CHAIN_DEFAULTS[chain_type]
    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(base, **changes) if changes else base


@dataclass(frozen=True)
class EventFilter:
    """Structural rule: event type set and/or attribute constraints."""

    types: frozenset[str] | None = None
    attributes: Mapping[str, frozenset[str]] | None = None

    @classmethod
    def of(
        cls,
        types: str | Iterable[str] | None = None,
        attributes: Mapping[str, str | Iterable[str]] | None = None,
    ) -> EventFilter:
        """Build a rule accepting single strings or iterables for every value."""
        return cls(
            types=_as_set(types) if types is not None else None,
            attributes=(
                {k: _as_set(v) for k, v in attributes.items()} if attributes is not None else None
            ),
        )


@dataclass(frozen=True)
class FilterConfig:
    """Static configuration for the basic filter tiers.

    An empty collection means the tier is not configured.
    """

    attribute_lists: Mapping[str, frozenset[str]] = field(default_factory=dict)
    wallet_addresses: frozenset[str] = frozenset()
    wasm_contracts: frozenset[str] = frozenset()
    event_filters: tuple[EventFilter, ...] = ()

    def with_attribute_lists(self, lists: Mapping[str, Iterable[str]]) -> FilterConfig:
        """Return a copy with `lists` merged over the current attribute lists."""
        merged = dict(self.attribute_lists)
        merged.update({k: frozenset(v) for k, v in lists.items()})
        return replace(self, attribute_lists=merged)


@dataclass(frozen=True)
class StreamConfig:
    """Configuration for the websocket streaming client."""

    ws_endpoint: str
    subscription_query: str = DEFAULT_SUBSCRIPTION_QUERY
    max_reconnect_attempts: int = 5
    reconnect_delay_s: float = 5.0
    chain_type: ChainType = ChainType.GENERIC
    exclude_unwanted_events: bool = True
    unwanted_event_keys: tuple[str, ...] = UNWANTED_EVENT_KEYS
    filter_files: Mapping[str, str] = field(default_factory=dict)  # list key -> JSON file path

    @classmethod
    def for_chain(cls, chain_type: ChainType, **kwargs) -> StreamConfig:
        """Build a config using the chain's public endpoint unless one is given."""
        endpoint = kwargs.pop("ws_endpoint", None) or DEFAULT_ENDPOINTS.get(
            chain_type.value, DEFAULT_ENDPOINTS["sei"]
        )
        return cls(ws_endpoint=endpoint, chain_type=chain_type, **kwargs)


def _as_set(value: str | Iterable[str]) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(value)
