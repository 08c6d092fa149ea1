"""Transaction classification and assembly of `DecodedTransaction`."""

from __future__ import annotations

from collections.abc import Sequence

from tmfind.constants import MESSAGE_EVENT, TRANSFER_EVENT, WITHDRAW_POS_EVENT
from tmfind.core.models import (
    DecodedEvent,
    DecodedTransaction,
    IbcTransferFact,
    StakingFact,
    SwapFact,
    TxEnvelope,
    TxType,
)
from tmfind.extraction.facts import extract_ibc_transfers, extract_staking, extract_swaps, extract_transfers

# checked in order against every `message.action`; first hit wins
ACTION_TYPES: tuple[tuple[str, TxType], ...] = (
    ("MsgSwap", TxType.SWAP),
    ("MsgDelegate", TxType.DELEGATE),
    ("MsgUndelegate", TxType.UNDELEGATE),
    ("MsgBeginRedelegate", TxType.REDELEGATE),
    ("MsgWithdrawDelegatorReward", TxType.WITHDRAW_REWARDS),
    ("MsgVote", TxType.GOVERNANCE_VOTE),
    ("MsgDeposit", TxType.PROPOSAL_DEPOSIT),
)


def classify(
    events: Sequence[DecodedEvent],
    swaps: Sequence[SwapFact],
    staking: Sequence[StakingFact],
    ibc_transfers: Sequence[IbcTransferFact],
) -> TxType | None:
    """Pick one label: explicit message actions first, then derived facts."""
    actions = [a for ev in events if ev.type == MESSAGE_EVENT for a in ev.values("action")]
    for marker, tx_type in ACTION_TYPES:
        if any(marker in a for a in actions):
            return tx_type

    if swaps:
        return TxType.SWAP
    if staking:
        return TxType(staking[0].action)
    if ibc_transfers:
        return TxType.IBC_TRANSFER
    types = {ev.type for ev in events}
    if TRANSFER_EVENT in types:
        return TxType.TRANSFER
    if WITHDRAW_POS_EVENT in types:
        return TxType.WITHDRAW
    return None


def build_transaction(envelope: TxEnvelope, events: Sequence[DecodedEvent]) -> DecodedTransaction:
    """Run every extractor over `events` and assemble the transaction record."""
    swaps = extract_swaps(events)
    staking = extract_staking(events)
    ibc = extract_ibc_transfers(events)
    return DecodedTransaction(
        height=envelope.height,
        tx_hash=envelope.tx_hash,
        events=tuple(events),
        transfers=extract_transfers(events),
        gas_wanted=envelope.gas_wanted,
        gas_used=envelope.gas_used,
        swaps=tuple(swaps),
        staking=tuple(staking),
        ibc_transfers=tuple(ibc),
        tx_type=classify(events, swaps, staking, ibc),
    )
