"""Core data models for decoded Tendermint transactions.

This module defines:
- `RawAttribute` / `RawEvent`: event rows exactly as the node emitted them.
- `TxEnvelope`: the transaction payload located inside one RPC message.
- `DecodedAttribute` / `DecodedEvent`: attributes after key/value decoding,
   with per-row provenance.
- Fact records (`TransferFacts`, `SwapFact`, `StakingFact`, `IbcTransferFact`).
- `DecodedTransaction`: the record handed to filters and subscribers.

Design notes
------------
- Everything except `DecodedEvent.attributes` is immutable; attribute lists are
  built once by the decoder and never touched again.
- `DecodedEvent.attributes` preserves first-appearance key order and keeps
  duplicate values.
- Filter evaluation never mutates a transaction; it returns a copy carrying
  `matched_filters`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# === Raw records ===


@dataclass(slots=True, frozen=True)
class RawAttribute:
    """One event attribute as received (possibly base64 encoded)."""

    key: str
    value: str
    index: bool = False


@dataclass(slots=True, frozen=True)
class RawEvent:
    """One event as received: a type plus its raw attribute rows."""

    type: str
    attributes: tuple[RawAttribute, ...] = ()


@dataclass(slots=True, frozen=True)
class TxEnvelope:
    """Transaction payload extracted from a subscription message."""

    height: str | None
    tx_hash: str | None
    events: tuple[RawEvent, ...]
    gas_wanted: str = "0"
    gas_used: str = "0"


# === Decoded records ===


@dataclass(slots=True, frozen=True)
class DecodedAttribute:
    """Provenance row: raw key/value next to what they decoded to."""

    raw_key: str
    raw_value: str
    key: str
    value: str
    index: bool = False


@dataclass(slots=True)
class DecodedEvent:
    """Event with decoded attributes grouped by key."""

    type: str
    attributes: dict[str, list[str]]
    provenance: tuple[DecodedAttribute, ...] = ()

    def values(self, key: str) -> list[str]:
        """All decoded values for `key` (empty list when absent)."""
        return self.attributes.get(key, [])

    def first(self, key: str) -> str | None:
        """First decoded value for `key`, or None."""
        vals = self.attributes.get(key)
        return vals[0] if vals else None

    @classmethod
    def from_provenance(cls, type_: str, rows: tuple[DecodedAttribute, ...]) -> DecodedEvent:
        """Group provenance rows by decoded key (order of first appearance)."""
        grouped: dict[str, list[str]] = {}
        for row in rows:
            grouped.setdefault(row.key, []).append(row.value)
        return cls(type=type_, attributes=grouped, provenance=rows)


# === Fact sets ===


@dataclass(slots=True, frozen=True)
class TransferFacts:
    """Addresses and amounts seen anywhere in a transaction (set semantics)."""

    senders: frozenset[str] = frozenset()
    receivers: frozenset[str] = frozenset()
    recipients: frozenset[str] = frozenset()
    spenders: frozenset[str] = frozenset()
    amounts: frozenset[str] = frozenset()


@dataclass(slots=True, frozen=True)
class SwapFact:
    pool_id: str
    token_in: str
    token_out: str
    amount_in: str
    amount_out: str
    sender: str = ""


@dataclass(slots=True, frozen=True)
class StakingFact:
    action: str  # "delegate" | "undelegate" | "redelegate" | "withdraw_rewards"
    delegator: str
    validator: str
    amount: str = ""
    denom: str = ""
    source_validator: str | None = None
    destination_validator: str | None = None


@dataclass(slots=True, frozen=True)
class IbcTransferFact:
    sender: str
    receiver: str
    source_channel: str
    source_port: str
    dest_channel: str | None
    dest_port: str | None
    amount: str
    denom: str


class TxType(str, Enum):
    """Best-effort classification of a whole transaction."""

    TRANSFER = "transfer"
    SWAP = "swap"
    IBC_TRANSFER = "ibc_transfer"
    WITHDRAW = "withdraw"
    DELEGATE = "delegate"
    UNDELEGATE = "undelegate"
    REDELEGATE = "redelegate"
    WITHDRAW_REWARDS = "withdraw_rewards"
    GOVERNANCE_VOTE = "governance_vote"
    PROPOSAL_DEPOSIT = "proposal_deposit"


# === Filter evidence ===


class FilterTier(str, Enum):
    ATTRIBUTE_LIST = "attribute_list"
    WALLET_ADDRESS = "wallet_address"
    WASM_CONTRACT = "wasm_contract"
    EVENT_FILTER = "event_filter"
    ADVANCED = "advanced"


@dataclass(slots=True, frozen=True)
class FilterMatch:
    """Evidence that one configured filter tier passed."""

    tier: FilterTier
    evidence: Any


# === Transaction ===


@dataclass(slots=True, frozen=True)
class DecodedTransaction:
    """A fully decoded transaction, ready for filtering and dispatch."""

    height: str | None
    tx_hash: str | None
    events: tuple[DecodedEvent, ...]
    transfers: TransferFacts
    gas_wanted: str = "0"
    gas_used: str = "0"
    swaps: tuple[SwapFact, ...] = ()
    staking: tuple[StakingFact, ...] = ()
    ibc_transfers: tuple[IbcTransferFact, ...] = ()
    tx_type: TxType | None = None
    matched_filters: tuple[FilterMatch, ...] = field(default=())

    def events_of_type(self, *types: str) -> list[DecodedEvent]:
        """Events whose type is one of `types`."""
        return [ev for ev in self.events if ev.type in types]

    def has_tier(self, tier: FilterTier) -> bool:
        return any(m.tier is tier for m in self.matched_filters)
