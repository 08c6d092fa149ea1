"""Attribute codec: conditional base64 decoding of event keys and values.

Older Tendermint releases base64-encode every attribute key and value, newer
CometBFT releases send them as plain text, and some gateways mix both within a
single message. `AttributeCodec` therefore decides per string whether decoding
applies.

Known limitation
----------------
`is_likely_encoded` is a heuristic. Plain alphanumeric tokens of 10+ characters
that happen to decode to printable UTF-8 are decoded (false positive), and
encoded values whose base64 form is shorter than 10 characters and purely
alphanumeric (e.g. ``c2VuZGVy`` for ``sender``) are left alone (false
negative). Address detection downstream depends on the exact threshold, so it
is kept as is.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Iterable

from tmfind.constants import ADDRESS_KEYS

LOGGER = logging.getLogger(__name__)

SHORT_TOKEN_LEN = 10

_B64_ALPHABET = re.compile(r"^[A-Za-z0-9+/=]+$")
_SHORT_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")


def _b64_to_text(s: str) -> str:
    """Decode base64 (missing padding tolerated) into strict UTF-8 text."""
    padded = s + "=" * (-len(s) % 4)
    return base64.b64decode(padded, validate=True).decode("utf-8")


class AttributeCodec:
    """Decode attribute strings, leaving human-readable values untouched.

    Parameters
    ----------
    bech32_prefix : str
        Account prefix of the configured chain (``cosmos``, ``osmo``, ``sei`` ...).
        Validator operator/consensus forms (``<prefix>valoper1``,
        ``<prefix>valcons1``) are recognized as addresses too.
    address_keys : Iterable[str]
        Attribute keys that conventionally hold addresses.
    """

    def __init__(self, bech32_prefix: str = "cosmos", *, address_keys: Iterable[str] = ADDRESS_KEYS) -> None:
        self.bech32_prefix = bech32_prefix
        self.address_keys = frozenset(address_keys)
        self._account_marker = f"{bech32_prefix}1"
        self._address_re = re.compile(rf"^{re.escape(bech32_prefix)}(?:valoper|valcons)?1[a-zA-Z0-9]{{38,58}}$")

    def is_address(self, value: str) -> bool:
        return bool(self._address_re.match(value))

    def is_address_key(self, key: str) -> bool:
        return key in self.address_keys

    def is_likely_encoded(self, s: str) -> bool:
        """Best-effort check that `s` is base64 of printable text."""
        if not s:
            return False
        if not _B64_ALPHABET.match(s):
            return False
        if len(s) < SHORT_TOKEN_LEN and _SHORT_IDENTIFIER.match(s):
            return False
        try:
            decoded = _b64_to_text(s)
        except (binascii.Error, UnicodeDecodeError):
            return False
        # control characters mean binary payload, not text
        return not _CONTROL_CHARS.search(decoded)

    def decode(self, s: str) -> str:
        """Decode base64 text; return `s` unchanged if it does not decode."""
        try:
            return _b64_to_text(s)
        except (binascii.Error, UnicodeDecodeError) as e:
            LOGGER.debug("attribute not decodable, keeping raw value %r: %s", s, e)
            return s

    def decode_address_aware(self, key: str, value: str) -> str:
        """Decode `value` only if the result is an address of the configured chain."""
        if key in self.address_keys and self._account_marker in value:
            return value
        if self.is_address(value):
            return value
        if self.is_likely_encoded(value):
            decoded = self.decode(value)
            if self.is_address(decoded):
                return decoded
        return value
