"""Decoding utilities: coin-string parsing shared by extractors and transformers."""

from __future__ import annotations

import re

_AMOUNT_DENOM = re.compile(r"^([0-9]+)(\D.*)$")
_NON_NUMERIC = re.compile(r"[a-zA-Z/]")


def split_amount(amount: str | None) -> tuple[str, str]:
    """Split ``"100uatom"`` into ``("100", "uatom")``.

    Strings without a leading digit run come back whole with an empty denom;
    None gives two empty strings.
    """
    if not amount:
        return "", ""
    m = _AMOUNT_DENOM.match(amount)
    if m is None:
        return amount, ""
    return m.group(1), m.group(2)


def strip_denom(token: str) -> str:
    """Best-effort numeric part of a token string (``"1000uosmo"`` -> ``"1000"``).

    Falls back to the input when stripping leaves nothing.
    """
    stripped = _NON_NUMERIC.sub("", token)
    return stripped or token


def parse_coins(amount: str, *, unknown_denom: str = "unknown") -> list[tuple[str, str]]:
    """Parse a comma-separated coin list (``"1uatom,2uosmo"``) into (amount, denom) pairs."""
    coins: list[tuple[str, str]] = []
    for part in amount.split(","):
        part = part.strip()
        if not part:
            continue
        m = _AMOUNT_DENOM.match(part)
        coins.append((m.group(1), m.group(2)) if m else (part, unknown_denom))
    return coins
