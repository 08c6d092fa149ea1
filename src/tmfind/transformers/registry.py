"""Transformer registry: one transformer class per chain type.

New chains are added with `@register_transformer(ChainType.X)`; unknown or
unregistered chain types get `GenericTransformer`.
"""

from __future__ import annotations

from collections.abc import Callable

from tmfind.core.config import ChainInfo, ChainType, chain_info_for
from tmfind.transformers.base import GenericTransformer

TransformerFactory = type[GenericTransformer]

_REGISTRY: dict[ChainType, TransformerFactory] = {}


def register_transformer(chain_type: ChainType) -> Callable[[TransformerFactory], TransformerFactory]:
    """Class decorator binding a transformer class to `chain_type`."""

    def deco(cls: TransformerFactory) -> TransformerFactory:
        _REGISTRY[chain_type] = cls
        return cls

    return deco


def registered_chains() -> list[ChainType]:
    return list(_REGISTRY)


def create_transformer(
    chain_type: ChainType | str | None = None,
    chain_info: ChainInfo | None = None,
) -> GenericTransformer:
    """Build the transformer for `chain_type` (falls back to the generic one)."""
    ct = ChainType.parse(chain_type)
    info = chain_info or chain_info_for(ct)
    cls = _REGISTRY.get(ct, GenericTransformer)
    return cls(info)
