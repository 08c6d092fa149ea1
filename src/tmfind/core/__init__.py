"""Core data models, configurations, and interfaces.

This package provides:
- Data models (RawEvent, TxEnvelope, DecodedEvent, DecodedTransaction, fact records)
- Configuration classes (ChainInfo, FilterConfig, EventFilter, StreamConfig)
- Protocols for the chain transformer and the transport connection
"""

from tmfind.core.config import (
    CHAIN_DEFAULTS,
    ChainInfo,
    ChainType,
    EventFilter,
    FilterConfig,
    StreamConfig,
    chain_info_for,
)
from tmfind.core.models import (
    DecodedAttribute,
    DecodedEvent,
    DecodedTransaction,
    FilterMatch,
    FilterTier,
    IbcTransferFact,
    RawAttribute,
    RawEvent,
    StakingFact,
    SwapFact,
    TransferFacts,
    TxEnvelope,
    TxType,
)

__all__ = [
    "CHAIN_DEFAULTS",
    "ChainInfo",
    "ChainType",
    "EventFilter",
    "FilterConfig",
    "StreamConfig",
    "chain_info_for",
    "DecodedAttribute",
    "DecodedEvent",
    "DecodedTransaction",
    "FilterMatch",
    "FilterTier",
    "IbcTransferFact",
    "RawAttribute",
    "RawEvent",
    "StakingFact",
    "SwapFact",
    "TransferFacts",
    "TxEnvelope",
    "TxType",
]
