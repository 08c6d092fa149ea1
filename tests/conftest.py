import base64
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from tmfind.core.models import DecodedEvent, DecodedTransaction, TxEnvelope
from tmfind.extraction.classify import build_transaction

DELEGATOR = "cosmos1qypqxpq9qcrsszg2pvxq6rs0zqg3yyc5lzv7xu"
RECIPIENT = "cosmos1xv9tklw7d82sezh9haa573wufgy59vmwe6xxe5"
VALIDATOR = "cosmosvaloper1qypqxpq9qcrsszg2pvxq6rs0zqg3yyc5abcdef"
VALIDATOR_2 = "cosmosvaloper1sjllsnramtg3ewxqwwrwjxfgc4n4ef9u2lcnj0"
CONTRACT = "cosmos14hj2tavq8fpesdwxxcu44rty3hh90vhujrvcmstl4zr3txmfvw9skjuwg8"
OSMO_ADDR = "osmo1qypqxpq9qcrsszg2pvxq6rs0zqg3yyc5lzv7xu"
TX_HASH = "9A3F5E7C1B2D4F6A8C0E9B7D5F3A1C2E4B6D8F0A9C7E5B3D1F2A4C6E8B0D9F7A"

EventSpec = tuple[str, dict[str, str | list[str]]]


def b64(s: str) -> str:
    return base64.b64encode(s.encode()).decode()


def _as_list(v: str | list[str]) -> list[str]:
    return [v] if isinstance(v, str) else list(v)


@pytest.fixture
def addrs() -> SimpleNamespace:
    return SimpleNamespace(
        delegator=DELEGATOR,
        recipient=RECIPIENT,
        validator=VALIDATOR,
        validator_2=VALIDATOR_2,
        contract=CONTRACT,
        osmo=OSMO_ADDR,
        tx_hash=TX_HASH,
    )


@pytest.fixture
def encode() -> Callable[[str], str]:
    return b64


@pytest.fixture
def make_message() -> Callable[..., dict[str, Any]]:
    """Build a CometBFT-style ``Tx`` subscription message from ``(type, attrs)`` pairs."""

    def build(
        events: list[EventSpec],
        *,
        height: str = "12345",
        tx_hash: str = TX_HASH,
        gas_wanted: str = "200000",
        gas_used: str = "150000",
        flat: dict[str, list[str]] | None = None,
    ) -> dict[str, Any]:
        structured = [
            {
                "type": ev_type,
                "attributes": [
                    {"key": k, "value": v, "index": True} for k, vals in attrs.items() for v in _as_list(vals)
                ],
            }
            for ev_type, attrs in events
        ]
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "query": "tm.event='Tx'",
                "data": {
                    "type": "tendermint/event/Tx",
                    "value": {
                        "TxResult": {
                            "height": height,
                            "index": 0,
                            "tx": "CpIBCo8BChwvY29zbW9zLmJhbmsudjFiZXRhMS5Nc2dTZW5k",
                            "result": {
                                "events": structured,
                                "gas_wanted": gas_wanted,
                                "gas_used": gas_used,
                            },
                        }
                    },
                },
                "events": flat if flat is not None else {"tx.hash": [tx_hash], "tx.height": [height]},
            },
        }

    return build


@pytest.fixture
def make_tx() -> Callable[..., DecodedTransaction]:
    """Build an already-decoded transaction (facts and type derived as in the pipeline)."""

    def build(
        events: list[EventSpec],
        *,
        height: str = "100",
        tx_hash: str = TX_HASH,
        gas_wanted: str = "200000",
        gas_used: str = "150000",
    ) -> DecodedTransaction:
        decoded = [
            DecodedEvent(type=ev_type, attributes={k: _as_list(v) for k, v in attrs.items()})
            for ev_type, attrs in events
        ]
        envelope = TxEnvelope(height=height, tx_hash=tx_hash, events=(), gas_wanted=gas_wanted, gas_used=gas_used)
        return build_transaction(envelope, decoded)

    return build


@pytest.fixture
def mock_rpc():
    rpc = AsyncMock()
    rpc.get_tx = AsyncMock(return_value={})
    rpc.latest_height = AsyncMock(return_value=100)
    rpc.aclose = AsyncMock()
    return rpc
