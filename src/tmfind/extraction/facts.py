"""Fact extraction over decoded events.

Each extractor is an independent pass over the full event list of one
transaction:
- `extract_transfers`: union of sender/receiver/recipient/spender/amount values
- `extract_swaps`: `token_swapped` events with pool and token legs
- `extract_staking`: delegate / undelegate / redelegate / withdraw-reward operations
- `extract_ibc_transfers`: `send_packet` on the transfer port correlated with
   sibling `transfer` events
"""

from __future__ import annotations

from collections.abc import Sequence

from tmfind.constants import IBC_TRANSFER_PORT, SEND_PACKET_EVENT, TOKEN_SWAPPED_EVENT, TRANSFER_EVENT
from tmfind.core.models import DecodedEvent, IbcTransferFact, StakingFact, SwapFact, TransferFacts
from tmfind.decoding.utils import split_amount, strip_denom

# (staking action, direct event type, message action marker)
STAKING_RULES: tuple[tuple[str, str, str], ...] = (
    ("withdraw_rewards", "withdraw_rewards", "MsgWithdrawDelegatorReward"),
    ("delegate", "delegate", "MsgDelegate"),
    ("undelegate", "unbond", "MsgUndelegate"),
    ("redelegate", "redelegate", "MsgBeginRedelegate"),
)


def extract_transfers(events: Sequence[DecodedEvent]) -> TransferFacts:
    senders: set[str] = set()
    receivers: set[str] = set()
    recipients: set[str] = set()
    spenders: set[str] = set()
    amounts: set[str] = set()
    buckets = {
        "sender": senders,
        "receiver": receivers,
        "recipient": recipients,
        "spender": spenders,
        "amount": amounts,
    }
    for ev in events:
        for key, bucket in buckets.items():
            bucket.update(ev.values(key))
    return TransferFacts(
        senders=frozenset(senders),
        receivers=frozenset(receivers),
        recipients=frozenset(recipients),
        spenders=frozenset(spenders),
        amounts=frozenset(amounts),
    )


def extract_swaps(events: Sequence[DecodedEvent]) -> list[SwapFact]:
    swaps: list[SwapFact] = []
    for ev in events:
        if ev.type != TOKEN_SWAPPED_EVENT:
            continue
        pool_id = ev.first("pool_id")
        token_in = ev.first("tokens_in")
        token_out = ev.first("tokens_out")
        if not (pool_id and token_in and token_out):
            continue
        swaps.append(
            SwapFact(
                pool_id=pool_id,
                token_in=token_in,
                token_out=token_out,
                amount_in=strip_denom(token_in),
                amount_out=strip_denom(token_out),
                sender=ev.first("sender") or "",
            )
        )
    return swaps


def _staking_action(ev: DecodedEvent) -> str | None:
    actions = ev.values("action")
    for action, event_type, marker in STAKING_RULES:
        if ev.type == event_type or any(marker in a for a in actions):
            return action
    return None


def extract_staking(events: Sequence[DecodedEvent]) -> list[StakingFact]:
    facts: list[StakingFact] = []
    for ev in events:
        action = _staking_action(ev)
        if action is None:
            continue
        delegator = ev.first("delegator") or ev.first("sender")
        amount, denom = split_amount(ev.first("amount"))

        if action == "redelegate":
            src = ev.first("source_validator")
            dst = ev.first("destination_validator")
            if not delegator or not (src or dst):
                continue
            facts.append(
                StakingFact(
                    action=action,
                    delegator=delegator,
                    validator=dst or src or "",
                    amount=amount,
                    denom=denom,
                    source_validator=src,
                    destination_validator=dst,
                )
            )
            continue

        validator = ev.first("validator")
        if not delegator or not validator:
            continue
        facts.append(StakingFact(action=action, delegator=delegator, validator=validator, amount=amount, denom=denom))
    return facts


def extract_ibc_transfers(events: Sequence[DecodedEvent]) -> list[IbcTransferFact]:
    transfers = [ev for ev in events if ev.type == TRANSFER_EVENT]
    facts: list[IbcTransferFact] = []
    if not transfers:
        return facts
    for ev in events:
        if ev.type != SEND_PACKET_EVENT:
            continue
        src_port = ev.first("packet_src_port")
        src_channel = ev.first("packet_src_channel")
        if src_port != IBC_TRANSFER_PORT or not src_channel:
            continue
        for te in transfers:
            sender = te.first("sender")
            receiver = te.first("recipient")
            raw_amount = te.first("amount")
            if not (sender and receiver and raw_amount):
                continue
            amount, denom = split_amount(raw_amount)
            facts.append(
                IbcTransferFact(
                    sender=sender,
                    receiver=receiver,
                    source_channel=src_channel,
                    source_port=src_port,
                    dest_channel=ev.first("packet_dst_channel"),
                    dest_port=ev.first("packet_dst_port"),
                    amount=amount,
                    denom=denom,
                )
            )
    return facts
