"""Generic chain transformer and message summary types.

`GenericTransformer` is the behaviour every chain gets:
- `transform_events`: identity
- `extract_messaging_data`: one `MessageSummary` per `message.action`, with the
  Cosmos SDK type URL ``/<namespace>.<module>.<version>.<Msg>`` split into
  module and action name
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from tmfind.constants import MESSAGE_EVENT
from tmfind.core.config import ChainInfo
from tmfind.core.models import DecodedEvent, DecodedTransaction
from tmfind.decoding.utils import parse_coins

# most Cosmos SDK chains use 6 decimals for the native token
NATIVE_DECIMALS = 6


@dataclass(slots=True, frozen=True)
class Coin:
    amount: str
    denom: str
    display_amount: str | None = None


@dataclass(slots=True)
class MessageSummary:
    message_type: str
    action: str
    module: str
    sender: str | None = None
    recipient: str | None = None
    amount: list[Coin] | None = None
    contract_address: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def parse_action(action: str) -> tuple[str, str]:
    """Split ``/cosmos.bank.v1beta1.MsgSend`` into ``("bank", "MsgSend")``."""
    if action.startswith("/"):
        parts = action.split(".")
        if len(parts) >= 3:
            return parts[1], parts[-1]
    return "unknown", action


class GenericTransformer:
    """Chain transformer for any Tendermint chain (no chain-specific events)."""

    def __init__(self, chain_info: ChainInfo) -> None:
        self.chain_info = chain_info

    def get_chain_info(self) -> ChainInfo:
        return self.chain_info

    def transform_events(self, tx: DecodedTransaction) -> DecodedTransaction:
        return tx

    def format_amount(self, amount: str, denom: str) -> Coin:
        """Coin with a human display amount when `denom` is the native denom."""
        info = self.chain_info
        if denom != info.denom or not info.display_denom:
            return Coin(amount, denom)
        try:
            whole = Decimal(amount).scaleb(-NATIVE_DECIMALS).normalize()
        except InvalidOperation:
            return Coin(amount, denom)
        return Coin(amount, denom, f"{whole:f} {info.display_denom}")

    def _summarize(self, ev: DecodedEvent, action: str) -> MessageSummary:
        module, name = parse_action(action)
        summary = MessageSummary(
            message_type=ev.type,
            action=name,
            module=module,
            sender=ev.first("sender"),
            recipient=ev.first("recipient"),
        )
        amounts = ev.values("amount")
        if amounts:
            summary.amount = [self.format_amount(a, d) for raw in amounts for a, d in parse_coins(raw)]
        if "wasm" in action:
            summary.contract_address = ev.first("contract")
        return summary

    def extract_messaging_data(self, tx: DecodedTransaction) -> list[MessageSummary]:
        return [
            self._summarize(ev, action)
            for ev in tx.events_of_type(MESSAGE_EVENT)
            for action in ev.values("action")
        ]
