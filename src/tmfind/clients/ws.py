"""Websocket shell around `TxPipeline`.

`StreamClient` owns the connection lifecycle only:
- load configured filter files (before the first connect)
- connect, send one ``subscribe`` request, feed every frame to the pipeline
- fixed-delay reconnect up to ``max_reconnect_attempts`` consecutive failures

All decoding, filtering and dispatch happens in the pipeline.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from tmfind.core.config import StreamConfig
from tmfind.core.interfaces import IMessageConnection
from tmfind.filters.loader import load_filter_files
from tmfind.pipeline.dispatch import Dispatcher, ReconnectAttempt
from tmfind.pipeline.processor import TxPipeline

LOGGER = logging.getLogger(__name__)

DEFAULT_WS_PING_INTERVAL = 30.0
DEFAULT_WS_PING_TIMEOUT = 10.0
_WS_CLOSE_TIMEOUT = 5.0


def subscribe_request(query: str, request_id: int | None = None) -> dict[str, Any]:
    """JSON-RPC ``subscribe`` body; the id defaults to the current time in ms."""
    return {
        "jsonrpc": "2.0",
        "method": "subscribe",
        "id": request_id if request_id is not None else int(time.time() * 1000),
        "params": [query],
    }


class StreamClient:
    """Subscribe to a Tendermint websocket and push frames through a pipeline.

    Parameters
    ----------
    config : StreamConfig
        Endpoint, query, reconnect policy and filter files.
    pipeline : TxPipeline | None
        Built from `config` (chain type, unwanted-event policy) when omitted.
    """

    def __init__(self, config: StreamConfig, pipeline: TxPipeline | None = None) -> None:
        if not config.ws_endpoint.strip():
            raise ValueError("ws_endpoint must be non-empty")
        self.config = config
        self.pipeline = pipeline or TxPipeline.from_config(
            chain_type=config.chain_type,
            exclude_unwanted_events=config.exclude_unwanted_events,
            unwanted_event_keys=config.unwanted_event_keys,
        )
        self._stop = asyncio.Event()
        self._ws: IMessageConnection | None = None
        self._filters_loaded = False

    @property
    def dispatcher(self) -> Dispatcher:
        return self.pipeline.dispatcher

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    def load_filters(self) -> None:
        """Merge `config.filter_files` into the pipeline's attribute lists.

        Raises `FilterLoadError` on unreadable or malformed files.
        """
        if self._filters_loaded or not self.config.filter_files:
            return
        lists = load_filter_files(self.config.filter_files)
        engine = self.pipeline.filter_engine
        engine.reload(engine.config.with_attribute_lists(lists))
        self._filters_loaded = True
        LOGGER.info("loaded %d filter list(s): %s", len(lists), ", ".join(sorted(lists)))

    async def run(self) -> None:
        """Connect and stream until `stop()` or the reconnect budget is spent."""
        self.load_filters()

        endpoint = self.config.ws_endpoint
        max_attempts = self.config.max_reconnect_attempts
        attempts = 0
        while not self._stop.is_set():
            try:
                LOGGER.info("connecting to %s", endpoint)
                async with websockets.connect(
                    endpoint,
                    ping_interval=DEFAULT_WS_PING_INTERVAL,
                    ping_timeout=DEFAULT_WS_PING_TIMEOUT,
                    close_timeout=_WS_CLOSE_TIMEOUT,
                ) as ws:
                    self._ws = ws
                    attempts = 0
                    self.dispatcher.connected.publish(endpoint)
                    try:
                        await self._subscribe(ws)
                        await self._receive_loop(ws)
                    finally:
                        self._ws = None
                        self.dispatcher.disconnected.publish(endpoint)
            except ConnectionClosed as e:
                LOGGER.warning("connection to %s closed: %s", endpoint, e)
            except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                LOGGER.warning("connection to %s failed: %s", endpoint, e)
                self.dispatcher.error.publish(e)

            if self._stop.is_set():
                break
            attempts += 1
            if attempts > max_attempts:
                LOGGER.error("giving up on %s after %d reconnect attempts", endpoint, max_attempts)
                break
            LOGGER.info("reconnecting in %.1fs (%d/%d)", self.config.reconnect_delay_s, attempts, max_attempts)
            self.dispatcher.reconnecting.publish(ReconnectAttempt(attempts, max_attempts))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.config.reconnect_delay_s)
            except asyncio.TimeoutError:
                pass
        LOGGER.info("stream stopped")

    def stop(self) -> None:
        """Signal the loop to exit; the open connection is left to `aclose`."""
        self._stop.set()

    async def aclose(self) -> None:
        """Stop and close the open connection, if any."""
        self.stop()
        if self._ws is not None:
            await self._ws.close()

    async def _subscribe(self, ws: IMessageConnection) -> None:
        req = subscribe_request(self.config.subscription_query)
        await ws.send(json.dumps(req))
        LOGGER.info("subscribed with query %r", self.config.subscription_query)

    async def _receive_loop(self, ws: IMessageConnection) -> None:
        async for raw in ws:
            if self._stop.is_set():
                return
            try:
                self.pipeline.process_raw(raw)
            except Exception as e:
                LOGGER.exception("handler failed while processing a message")
                self.dispatcher.error.publish(e)
