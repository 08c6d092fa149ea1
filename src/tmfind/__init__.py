from __future__ import annotations

from .core.config import ChainInfo, ChainType, EventFilter, FilterConfig, StreamConfig
from .core.models import DecodedEvent, DecodedTransaction, FilterMatch, FilterTier, TxType
from .decoding.codec import AttributeCodec
from .filters.advanced import AdvancedFilter, AttributeCondition, MatchType
from .filters.loader import FilterLoadError, load_filter_config
from .pipeline.dispatch import Dispatcher, Topic
from .pipeline.processor import TxPipeline
from .transformers.registry import create_transformer, register_transformer

__all__ = [
    "TxPipeline",
    "Dispatcher",
    "Topic",
    "AttributeCodec",
    "ChainInfo",
    "ChainType",
    "EventFilter",
    "FilterConfig",
    "StreamConfig",
    "DecodedEvent",
    "DecodedTransaction",
    "FilterMatch",
    "FilterTier",
    "TxType",
    "AdvancedFilter",
    "AttributeCondition",
    "MatchType",
    "FilterLoadError",
    "load_filter_config",
    "create_transformer",
    "register_transformer",
]
