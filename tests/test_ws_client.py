import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from websockets.exceptions import ConnectionClosed

from tmfind.clients.ws import StreamClient, subscribe_request
from tmfind.core.config import StreamConfig
from tmfind.core.interfaces import IMessageConnection
from tmfind.filters.loader import FilterLoadError
from tmfind.pipeline.dispatch import ReconnectAttempt

DELEGATE = "/cosmos.staking.v1beta1.MsgDelegate"


class FakeWebSocket:
    def __init__(self, frames, *, drop: bool = False) -> None:
        self.frames = list(frames)
        self.drop = drop
        self.sent: list[str] = []
        self.closed = False

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def recv(self) -> str:
        return self.frames.pop(0)

    async def close(self) -> None:
        self.closed = True

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for frame in self.frames:
            yield frame
        if self.drop:
            raise ConnectionClosed(None, None)


class FakeConnect:
    def __init__(self, ws: FakeWebSocket) -> None:
        self.ws = ws

    async def __aenter__(self) -> FakeWebSocket:
        return self.ws

    async def __aexit__(self, *exc) -> bool:
        return False


def _config(**kwargs) -> StreamConfig:
    kwargs.setdefault("max_reconnect_attempts", 0)
    kwargs.setdefault("reconnect_delay_s", 0)
    return StreamConfig(ws_endpoint="wss://rpc.example.org/websocket", **kwargs)


@pytest.fixture
def tx_frame(make_message, addrs: SimpleNamespace) -> str:
    msg = make_message(
        [("message", {"action": DELEGATE, "delegator": addrs.delegator, "validator": addrs.validator, "amount": "5uatom"})]
    )
    return json.dumps(msg)


def test_subscribe_request_shape() -> None:
    assert subscribe_request("tm.event='Tx'", 7) == {
        "jsonrpc": "2.0",
        "method": "subscribe",
        "id": 7,
        "params": ["tm.event='Tx'"],
    }
    assert isinstance(subscribe_request("q")["id"], int)


def test_empty_endpoint_is_rejected() -> None:
    with pytest.raises(ValueError):
        StreamClient(StreamConfig(ws_endpoint=" "))


@pytest.mark.asyncio
async def test_subscribes_and_feeds_frames(tx_frame: str) -> None:
    ws = FakeWebSocket([json.dumps({"jsonrpc": "2.0", "id": 1, "result": {}}), tx_frame])
    client = StreamClient(_config(subscription_query="tm.event='Tx' AND message.module='staking'"))
    d = client.dispatcher
    connected, disconnected, confirmed, txs = [], [], [], []
    d.connected.subscribe(connected.append)
    d.disconnected.subscribe(disconnected.append)
    d.subscription_confirmed.subscribe(confirmed.append)
    d.tx.subscribe(txs.append)

    with patch("tmfind.clients.ws.websockets.connect", return_value=FakeConnect(ws)) as connect:
        await client.run()

    connect.assert_called_once()
    assert connect.call_args.args[0] == "wss://rpc.example.org/websocket"
    sent = json.loads(ws.sent[0])
    assert sent["method"] == "subscribe"
    assert sent["params"] == ["tm.event='Tx' AND message.module='staking'"]
    assert connected == disconnected == ["wss://rpc.example.org/websocket"]
    assert len(confirmed) == 1
    assert len(txs) == 1
    assert not client.is_connected


@pytest.mark.asyncio
async def test_handler_errors_do_not_stop_the_stream(tx_frame: str) -> None:
    ws = FakeWebSocket([tx_frame, tx_frame])
    client = StreamClient(_config())
    errors, seen = [], []
    client.dispatcher.error.subscribe(errors.append)

    def flaky(tx) -> None:
        seen.append(tx)
        if len(seen) == 1:
            raise RuntimeError("subscriber blew up")

    client.dispatcher.filtered_tx.subscribe(flaky)

    with patch("tmfind.clients.ws.websockets.connect", return_value=FakeConnect(ws)):
        await client.run()

    assert len(seen) == 2
    assert [str(e) for e in errors] == ["subscriber blew up"]


@pytest.mark.asyncio
async def test_reconnects_after_failure_and_resets_budget(tx_frame: str) -> None:
    ws = FakeWebSocket([tx_frame])
    client = StreamClient(_config(max_reconnect_attempts=1))
    attempts = []
    client.dispatcher.reconnecting.subscribe(attempts.append)
    client.dispatcher.tx.subscribe(lambda tx: client.stop())

    with patch(
        "tmfind.clients.ws.websockets.connect",
        side_effect=[OSError("connection refused"), FakeConnect(ws)],
    ) as connect:
        await client.run()

    assert connect.call_count == 2
    assert attempts == [ReconnectAttempt(1, 1)]


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts() -> None:
    client = StreamClient(_config(max_reconnect_attempts=2))
    attempts, errors = [], []
    client.dispatcher.reconnecting.subscribe(attempts.append)
    client.dispatcher.error.subscribe(errors.append)

    with patch("tmfind.clients.ws.websockets.connect", side_effect=OSError("connection refused")) as connect:
        await client.run()

    assert connect.call_count == 3
    assert [a.attempt for a in attempts] == [1, 2]
    assert len(errors) == 3


@pytest.mark.asyncio
async def test_connection_drop_triggers_reconnect(tx_frame: str) -> None:
    first = FakeWebSocket([], drop=True)
    second = FakeWebSocket([tx_frame])
    client = StreamClient(_config(max_reconnect_attempts=3))
    client.dispatcher.tx.subscribe(lambda tx: client.stop())

    with patch(
        "tmfind.clients.ws.websockets.connect",
        side_effect=[FakeConnect(first), FakeConnect(second)],
    ):
        await client.run()

    assert len(first.sent) == 1
    assert len(second.sent) == 1


@pytest.mark.asyncio
async def test_filter_files_load_before_connecting(tmp_path: Path, addrs: SimpleNamespace) -> None:
    lst = tmp_path / "validators.json"
    lst.write_text(json.dumps([addrs.validator]), encoding="utf-8")
    client = StreamClient(_config(filter_files={"validator": str(lst)}))

    with patch("tmfind.clients.ws.websockets.connect", side_effect=OSError("offline")):
        await client.run()

    assert client.pipeline.filter_engine.config.attribute_lists == {"validator": frozenset({addrs.validator})}


@pytest.mark.asyncio
async def test_missing_filter_file_fails_fast(tmp_path: Path) -> None:
    client = StreamClient(_config(filter_files={"sender": str(tmp_path / "missing.json")}))

    with patch("tmfind.clients.ws.websockets.connect") as connect:
        with pytest.raises(FilterLoadError):
            await client.run()

    connect.assert_not_called()


@pytest.mark.asyncio
async def test_aclose_closes_open_socket() -> None:
    client = StreamClient(_config())
    ws = FakeWebSocket([])
    client._ws = ws

    await client.aclose()

    assert ws.closed


def test_fake_socket_satisfies_connection_protocol() -> None:
    assert isinstance(FakeWebSocket([]), IMessageConnection)
    assert not isinstance(object(), IMessageConnection)
