"""Semantic extraction: typed facts and classification from decoded events."""

from tmfind.extraction.classify import ACTION_TYPES, build_transaction, classify
from tmfind.extraction.facts import (
    STAKING_RULES,
    extract_ibc_transfers,
    extract_staking,
    extract_swaps,
    extract_transfers,
)

__all__ = [
    "ACTION_TYPES",
    "STAKING_RULES",
    "build_transaction",
    "classify",
    "extract_ibc_transfers",
    "extract_staking",
    "extract_swaps",
    "extract_transfers",
]
