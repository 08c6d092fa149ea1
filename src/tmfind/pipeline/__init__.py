"""Message processing pipeline and typed dispatch.

This package provides:
- `TxPipeline`: per-message decode/filter/dispatch
- `Dispatcher` / `Topic`: typed subscriber registration per notification kind
"""

from tmfind.pipeline.dispatch import Dispatcher, ReconnectAttempt, Topic
from tmfind.pipeline.processor import TxPipeline, is_staking_tx

__all__ = [
    "Dispatcher",
    "ReconnectAttempt",
    "Topic",
    "TxPipeline",
    "is_staking_tx",
]
