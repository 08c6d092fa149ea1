"""Load filter lists and filter-config documents from JSON files.

- `load_filter_list(path)`: one file holding a single JSON array of strings
- `load_filter_files(mapping)`: ``{list_key: path}`` -> ``{list_key: frozenset}``
- `load_filter_config(path)`: a full filter document (basic tiers + advanced filters)

Any failure (missing file, unreadable file, wrong shape) raises
`FilterLoadError`; nothing is swallowed here.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from tmfind.constants import UNNAMED_FILTER
from tmfind.core.config import EventFilter, FilterConfig
from tmfind.filters.advanced import AdvancedFilter, AttributeCondition, MatchType, NumericRange


class FilterLoadError(ValueError):
    """A filter file or filter-config document could not be loaded."""


_STRING_LIST = TypeAdapter(list[str])

StrOrList = Union[str, list[str]]


# ---------- document models ----------


class ConditionModel(BaseModel):
    key: str
    value: StrOrList | None = None
    matchType: MatchType = MatchType.EXACT
    negated: bool = False

    def to_condition(self) -> AttributeCondition:
        return AttributeCondition.of(self.key, self.value, self.matchType, self.negated)


class RangeModel(BaseModel):
    field: str
    min: float | None = None
    max: float | None = None


class AdvancedFilterModel(BaseModel):
    name: str = UNNAMED_FILTER
    eventType: StrOrList | None = None
    anyOf: list[ConditionModel] = Field(default_factory=list)
    allOf: list[ConditionModel] = Field(default_factory=list)
    noneOf: list[ConditionModel] = Field(default_factory=list)
    messageType: StrOrList | None = None
    or_: list[AdvancedFilterModel] = Field(default_factory=list, alias="or")
    and_: list[AdvancedFilterModel] = Field(default_factory=list, alias="and")
    txHash: StrOrList | None = None
    range: RangeModel | None = None

    def to_filter(self) -> AdvancedFilter:
        return AdvancedFilter(
            name=self.name,
            event_type=_opt_set(self.eventType),
            any_of=tuple(c.to_condition() for c in self.anyOf),
            all_of=tuple(c.to_condition() for c in self.allOf),
            none_of=tuple(c.to_condition() for c in self.noneOf),
            message_type=_opt_tuple(self.messageType),
            or_filters=tuple(f.to_filter() for f in self.or_),
            and_filters=tuple(f.to_filter() for f in self.and_),
            tx_hash=_opt_set(self.txHash),
            numeric_range=(
                NumericRange(self.range.field, self.range.min, self.range.max) if self.range else None
            ),
        )


class EventFilterModel(BaseModel):
    type: StrOrList | None = None
    attributes: dict[str, StrOrList] | None = None

    def to_event_filter(self) -> EventFilter:
        return EventFilter.of(self.type, self.attributes)


class FilterDocument(BaseModel):
    filter_files: dict[str, str] = Field(default_factory=dict)
    wallet_addresses: StrOrList = Field(default_factory=list)
    wasm_contracts: StrOrList = Field(default_factory=list)
    event_filters: list[EventFilterModel] = Field(default_factory=list)
    advanced_filters: list[AdvancedFilterModel] = Field(default_factory=list)


AdvancedFilterModel.model_rebuild()


def _opt_set(value: StrOrList | None) -> frozenset[str] | None:
    if value is None:
        return None
    return frozenset([value] if isinstance(value, str) else value)


def _opt_tuple(value: StrOrList | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return (value,) if isinstance(value, str) else tuple(value)


# ---------- loaders ----------


def load_filter_list(path: str | Path) -> list[str]:
    """Read one filter file: a JSON array of strings."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise FilterLoadError(f"cannot read filter file {p}: {e}") from e
    try:
        return _STRING_LIST.validate_json(text)
    except ValidationError as e:
        raise FilterLoadError(f"filter file {p} must contain a JSON array of strings") from e


def load_filter_files(files: Mapping[str, str | Path], *, base_dir: Path | None = None) -> dict[str, frozenset[str]]:
    """Load every ``{list_key: path}`` entry; relative paths resolve against `base_dir` (cwd)."""
    root = base_dir or Path.cwd()
    return {key: frozenset(load_filter_list(root / path)) for key, path in files.items()}


def load_filter_config(path: str | Path) -> tuple[FilterConfig, list[AdvancedFilter]]:
    """Load a filter document and the filter files it references.

    Relative `filter_files` paths resolve against the document's directory.
    """
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
        doc = FilterDocument.model_validate(raw)
    except OSError as e:
        raise FilterLoadError(f"cannot read filter config {p}: {e}") from e
    except (json.JSONDecodeError, ValidationError) as e:
        raise FilterLoadError(f"invalid filter config {p}: {e}") from e

    config = FilterConfig(
        attribute_lists=load_filter_files(doc.filter_files, base_dir=p.parent),
        wallet_addresses=_opt_set(doc.wallet_addresses) or frozenset(),
        wasm_contracts=_opt_set(doc.wasm_contracts) or frozenset(),
        event_filters=tuple(ef.to_event_filter() for ef in doc.event_filters),
    )
    return config, [af.to_filter() for af in doc.advanced_filters]
