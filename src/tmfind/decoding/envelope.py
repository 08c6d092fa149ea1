"""Locate the transaction payload inside a subscription message.

Nodes of different versions (and different chains) wrap a `Tx` event in
slightly different shapes. This module provides:
- `extract_envelope`: message -> `TxEnvelope` (or None when the message carries
   no transaction)
- `flat_events_to_raw`: rebuild structured events from the flattened
   ``"type.attr" -> [values]`` map
- `is_subscription_confirmation` / `contains_unwanted_events`: cheap message
   triage used before any decoding

Missing fields are never errors: they yield None or defaults.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tmfind.constants import UNWANTED_EVENT_KEYS
from tmfind.core.models import RawAttribute, RawEvent, TxEnvelope


def _get(obj: Any, *path: str) -> Any:
    """Walk nested mappings; None as soon as a step is missing or not a mapping."""
    cur = obj
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _first_flat(flat: Any, key: str) -> str | None:
    if not isinstance(flat, Mapping):
        return None
    vals = flat.get(key)
    if isinstance(vals, list) and vals:
        return str(vals[0])
    return None


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


# ---------- event list parsing ----------


def parse_raw_events(events: Any) -> tuple[RawEvent, ...]:
    """Parse a structured ``[{type, attributes: [{key, value, index}]}]`` list."""
    if not isinstance(events, list):
        return ()
    out: list[RawEvent] = []
    for ev in events:
        if not isinstance(ev, Mapping):
            continue
        attrs = ev.get("attributes")
        rows = tuple(
            RawAttribute(
                key=_as_str(a.get("key")),
                value=_as_str(a.get("value")),
                index=bool(a.get("index", False)),
            )
            for a in (attrs if isinstance(attrs, list) else [])
            if isinstance(a, Mapping)
        )
        out.append(RawEvent(type=_as_str(ev.get("type")), attributes=rows))
    return tuple(out)


def flat_events_to_raw(flat: Mapping[str, Sequence[str] | str]) -> tuple[RawEvent, ...]:
    """Rebuild structured events from ``{"transfer.amount": ["5uosmo"], ...}``.

    Event types are taken from the first dot-separated segment, in order of
    discovery; the remainder is the attribute key. Each value becomes its own
    row, flagged as indexed since the flat form does not say.
    """
    grouped: dict[str, list[RawAttribute]] = {}
    for composite, values in flat.items():
        event_type, sep, attr_key = composite.partition(".")
        if not sep:
            continue
        if isinstance(values, str):
            values = [values]
        elif not isinstance(values, list):
            continue
        rows = grouped.setdefault(event_type, [])
        for v in values:
            rows.append(RawAttribute(key=attr_key, value=_as_str(v), index=True))
    return tuple(RawEvent(type=t, attributes=tuple(rows)) for t, rows in grouped.items() if rows)


# ---------- hash resolution ----------


def _resolve_hash(message: Mapping[str, Any], tx_result: Mapping[str, Any]) -> str | None:
    candidates = (
        tx_result.get("hash"),
        _get(message, "result", "data", "value", "hash"),
        _get(tx_result, "tx_result", "hash"),
        _first_flat(message.get("events"), "tx.hash"),
        _first_flat(_get(message, "result", "events"), "tx.hash"),
    )
    for c in candidates:
        if c:
            return str(c)
    return None


# ---------- main extractor ----------


def extract_envelope(message: Mapping[str, Any]) -> TxEnvelope | None:
    """Return the transaction payload of `message`, or None if it carries none."""
    tx_result = _get(message, "result", "data", "value", "TxResult")
    if not isinstance(tx_result, Mapping):
        return None

    result = tx_result.get("result") if isinstance(tx_result.get("result"), Mapping) else {}
    legacy = tx_result.get("tx_result") if isinstance(tx_result.get("tx_result"), Mapping) else {}

    events = parse_raw_events(result.get("events") or legacy.get("events") or [])
    if not events:
        for flat in (message.get("events"), _get(message, "result", "events")):
            if isinstance(flat, Mapping):
                events = flat_events_to_raw(flat)
                if events:
                    break

    height = tx_result.get("height")
    return TxEnvelope(
        height=None if height is None else str(height),
        tx_hash=_resolve_hash(message, tx_result),
        events=events,
        gas_wanted=_as_str(result.get("gas_wanted") or legacy.get("gas_wanted") or "0"),
        gas_used=_as_str(result.get("gas_used") or legacy.get("gas_used") or "0"),
    )


# ---------- triage ----------


def is_subscription_confirmation(message: Mapping[str, Any]) -> bool:
    """True for the bare ``{"id": .., "result": {}}`` reply to a subscribe call."""
    result = message.get("result")
    return (
        message.get("id") is not None
        and isinstance(result, Mapping)
        and not result.get("data")
        and not result.get("events")
    )


def contains_unwanted_events(message: Mapping[str, Any], keys: Iterable[str] = UNWANTED_EVENT_KEYS) -> bool:
    """True if any flattened event map in `message` carries one of `keys`."""
    flats = [_get(message, "result", "events"), message.get("events")]
    keys = tuple(keys)
    return any(isinstance(flat, Mapping) and key in flat for flat in flats for key in keys)
