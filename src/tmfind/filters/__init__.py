"""Filter tiers and filter configuration loading.

This package provides:
- `FilterEngine`: wasm contract, wallet, attribute-list and structural tiers
- `AdvancedFilterEngine`: recursive boolean filters with match strategies
- Loaders for JSON filter lists and filter-config documents
"""

from tmfind.filters.advanced import (
    AdvancedFilter,
    AdvancedFilterEngine,
    AdvancedFilterResult,
    AttributeCondition,
    MatchType,
    NumericRange,
    matches_condition,
    matches_filter,
)
from tmfind.filters.basic import FilterEngine, FilterResult
from tmfind.filters.loader import FilterLoadError, load_filter_config, load_filter_files, load_filter_list

__all__ = [
    "AdvancedFilter",
    "AdvancedFilterEngine",
    "AdvancedFilterResult",
    "AttributeCondition",
    "MatchType",
    "NumericRange",
    "matches_condition",
    "matches_filter",
    "FilterEngine",
    "FilterResult",
    "FilterLoadError",
    "load_filter_config",
    "load_filter_files",
    "load_filter_list",
]
