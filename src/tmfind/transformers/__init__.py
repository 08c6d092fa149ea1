"""Chain-specific transformation of decoded transactions.

This package provides:
- `GenericTransformer`: identity transform + message summaries for any chain
- `OsmosisTransformer`: adds swap and liquidity-pool summaries
- `create_transformer` / `register_transformer`: chain-type registry
"""

from tmfind.transformers.base import Coin, GenericTransformer, MessageSummary, parse_action
from tmfind.transformers.osmosis import OsmosisTransformer
from tmfind.transformers.registry import create_transformer, register_transformer, registered_chains

__all__ = [
    "Coin",
    "GenericTransformer",
    "MessageSummary",
    "OsmosisTransformer",
    "create_transformer",
    "parse_action",
    "register_transformer",
    "registered_chains",
]
