"""Basic filter tiers over a decoded transaction.

Tiers (each optional; an unconfigured tier never fails a transaction):
- wasm contract: a wasm `message` whose `contract` is in the configured set
- wallet address: a staking/distribution/IBC/wasm `message` naming a watched
  address in one of the role attributes
- attribute lists: any event attribute value in the list configured for its key
  (a `recipient` list also matches `receiver` attributes)
- event filters: structural rules on event type and attribute values

The overall decision is the conjunction of configured tiers. Every passing
configured tier contributes one `FilterMatch` as evidence.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tmfind.constants import MESSAGE_EVENT, WALLET_ACTION_PREFIXES, WALLET_ROLE_KEYS
from tmfind.core.config import EventFilter, FilterConfig
from tmfind.core.models import DecodedTransaction, FilterMatch, FilterTier


@dataclass(slots=True, frozen=True)
class FilterResult:
    passed: bool
    matched: tuple[FilterMatch, ...] = ()


# ---------- tier checks ----------


def _is_wasm(action: str) -> bool:
    return "wasm" in action


def match_wasm_contracts(tx: DecodedTransaction, contracts: frozenset[str]) -> list[str]:
    """Configured contracts touched by wasm `message` events."""
    hits: list[str] = []
    for ev in tx.events_of_type(MESSAGE_EVENT):
        if not any(_is_wasm(a) for a in ev.values("action")):
            continue
        for c in ev.values("contract"):
            if c in contracts and c not in hits:
                hits.append(c)
    return hits


def match_wallets(tx: DecodedTransaction, wallets: frozenset[str]) -> list[dict[str, str]]:
    """One record per (action, role, address) where a watched wallet appears."""
    details: list[dict[str, str]] = []
    for ev in tx.events_of_type(MESSAGE_EVENT):
        for action in ev.values("action"):
            if not (action.startswith(WALLET_ACTION_PREFIXES) or _is_wasm(action)):
                continue
            for role in WALLET_ROLE_KEYS:
                for value in ev.values(role):
                    if value in wallets:
                        details.append({"action": action, "role": role, "address": value})
    return details


def match_attribute_lists(tx: DecodedTransaction, lists: Mapping[str, frozenset[str]]) -> list[dict[str, str]]:
    hits: list[dict[str, str]] = []
    for ev in tx.events:
        for key, allowed in lists.items():
            candidates = list(ev.values(key))
            if key == "recipient":
                candidates.extend(ev.values("receiver"))
            hits.extend(
                {"event_type": ev.type, "key": key, "value": v} for v in candidates if v in allowed
            )
    return hits


def _rule_matches(rule: EventFilter, event_type: str, attributes: dict[str, list[str]]) -> bool:
    if rule.types is not None and event_type not in rule.types:
        return False
    if rule.attributes is None:
        return True
    if not rule.attributes:
        return False
    return any(
        any(v in allowed for v in attributes.get(key, ()))
        for key, allowed in rule.attributes.items()
    )


def match_event_filters(tx: DecodedTransaction, rules: tuple[EventFilter, ...]) -> list[dict[str, Any]]:
    hits: list[dict[str, Any]] = []
    for ev in tx.events:
        for idx, rule in enumerate(rules):
            if _rule_matches(rule, ev.type, ev.attributes):
                hits.append({"event_type": ev.type, "rule": idx})
    return hits


# ---------- engine ----------


class FilterEngine:
    """Evaluate the basic tiers of a `FilterConfig` against transactions.

    The configuration is held by reference and never mutated; use `reload`
    to swap in a new one.
    """

    def __init__(self, config: FilterConfig | None = None) -> None:
        self._config = config or FilterConfig()

    @property
    def config(self) -> FilterConfig:
        return self._config

    def reload(self, config: FilterConfig) -> None:
        """Replace the whole configuration at once."""
        self._config = config

    def apply(self, tx: DecodedTransaction) -> FilterResult:
        cfg = self._config
        matched: list[FilterMatch] = []
        passed = True

        if cfg.wasm_contracts:
            contracts = match_wasm_contracts(tx, cfg.wasm_contracts)
            if contracts:
                matched.append(FilterMatch(FilterTier.WASM_CONTRACT, {"contract_addresses": contracts}))
            else:
                passed = False

        if cfg.wallet_addresses:
            wallets = match_wallets(tx, cfg.wallet_addresses)
            if wallets:
                matched.append(FilterMatch(FilterTier.WALLET_ADDRESS, wallets))
            else:
                passed = False

        if cfg.attribute_lists:
            attrs = match_attribute_lists(tx, cfg.attribute_lists)
            if attrs:
                matched.append(FilterMatch(FilterTier.ATTRIBUTE_LIST, attrs))
            else:
                passed = False

        if cfg.event_filters:
            rules = match_event_filters(tx, cfg.event_filters)
            if rules:
                matched.append(FilterMatch(FilterTier.EVENT_FILTER, rules))
            else:
                passed = False

        return FilterResult(passed=passed, matched=tuple(matched))
