"""Per-message pipeline: envelope -> decode -> facts -> transform -> filters -> dispatch.

`TxPipeline` holds only immutable configuration (codec, transformer, filter
engines); every call works on its own message, so one pipeline can serve
several connections.

Order for one message
---------------------
1. publish the raw message on `message`
2. drop oracle vote noise (if enabled)
3. subscription acknowledgements go to `subscription_confirmed`
4. extract + decode + classify, then `transform_events`; publish on `tx`
5. basic tiers, then advanced filters; on pass publish on `filtered_tx`
   and on `wasm_tx` / `wallet_tx` / `staking_tx` as applicable
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from tmfind.constants import MESSAGE_EVENT, STAKING_ACTION_MARKERS, UNWANTED_EVENT_KEYS
from tmfind.core.config import ChainInfo, ChainType, FilterConfig
from tmfind.core.interfaces import IChainTransformer
from tmfind.core.models import DecodedTransaction, FilterMatch, FilterTier
from tmfind.decoding.codec import AttributeCodec
from tmfind.decoding.decoder import EventDecoder
from tmfind.decoding.envelope import contains_unwanted_events, extract_envelope, is_subscription_confirmation
from tmfind.extraction.classify import build_transaction
from tmfind.filters.advanced import AdvancedFilter, AdvancedFilterEngine
from tmfind.filters.basic import FilterEngine
from tmfind.pipeline.dispatch import Dispatcher
from tmfind.transformers.base import MessageSummary
from tmfind.transformers.registry import create_transformer

LOGGER = logging.getLogger(__name__)


def is_staking_tx(tx: DecodedTransaction) -> bool:
    """True if any `message.action` belongs to the staking or distribution modules."""
    return any(
        marker in action
        for ev in tx.events_of_type(MESSAGE_EVENT)
        for action in ev.values("action")
        for marker in STAKING_ACTION_MARKERS
    )


class TxPipeline:
    """Decode, filter and dispatch Tendermint subscription messages.

    Parameters
    ----------
    transformer : IChainTransformer | None
        Chain transformer; defaults to the generic one.
    filter_engine : FilterEngine | None
        Basic tiers; defaults to an unconfigured engine (everything passes).
    advanced_engine : AdvancedFilterEngine | None
        Advanced filters; defaults to none registered (everything passes).
    codec : AttributeCodec | None
        Defaults to a codec using the transformer's bech32 prefix.
    dispatcher : Dispatcher | None
        Topics to publish on; a fresh one is created when omitted.
    exclude_unwanted_events : bool
        Drop messages carrying any of `unwanted_event_keys` before decoding.
    """

    def __init__(
        self,
        *,
        transformer: IChainTransformer | None = None,
        filter_engine: FilterEngine | None = None,
        advanced_engine: AdvancedFilterEngine | None = None,
        codec: AttributeCodec | None = None,
        dispatcher: Dispatcher | None = None,
        exclude_unwanted_events: bool = True,
        unwanted_event_keys: Iterable[str] = UNWANTED_EVENT_KEYS,
    ) -> None:
        self.transformer: IChainTransformer = transformer or create_transformer()
        self.codec = codec or AttributeCodec(self.transformer.get_chain_info().bech32_prefix)
        self.decoder = EventDecoder(self.codec)
        self.filter_engine = filter_engine or FilterEngine()
        self.advanced_engine = advanced_engine or AdvancedFilterEngine()
        self.dispatcher = dispatcher or Dispatcher()
        self.exclude_unwanted_events = exclude_unwanted_events
        self.unwanted_event_keys = tuple(unwanted_event_keys)

    @classmethod
    def from_config(
        cls,
        filter_config: FilterConfig | None = None,
        advanced_filters: Sequence[AdvancedFilter] = (),
        *,
        chain_type: ChainType | str | None = ChainType.GENERIC,
        chain_info: ChainInfo | None = None,
        **kwargs: Any,
    ) -> TxPipeline:
        return cls(
            transformer=create_transformer(chain_type, chain_info),
            filter_engine=FilterEngine(filter_config),
            advanced_engine=AdvancedFilterEngine(advanced_filters),
            **kwargs,
        )

    # ---------- stages ----------

    def decode_message(self, message: Mapping[str, Any]) -> DecodedTransaction | None:
        """Envelope -> decoded, classified, chain-transformed transaction (no filtering)."""
        envelope = extract_envelope(message)
        if envelope is None:
            return None
        events = self.decoder.decode(envelope.events)
        tx = build_transaction(envelope, events)
        return self.transformer.transform_events(tx)

    def evaluate(self, tx: DecodedTransaction) -> DecodedTransaction | None:
        """Run the filter tiers; a copy carrying `matched_filters` if all pass, else None."""
        basic = self.filter_engine.apply(tx)
        if not basic.passed:
            return None
        advanced = self.advanced_engine.apply(tx)
        if not advanced.passed:
            return None
        matched = list(basic.matched)
        if advanced.matched:
            matched.append(FilterMatch(FilterTier.ADVANCED, list(advanced.matched)))
        return replace(tx, matched_filters=tuple(matched))

    # ---------- entry points ----------

    def process_raw(self, data: str | bytes) -> DecodedTransaction | None:
        """Parse one frame and process it; malformed frames are logged and dropped."""
        try:
            message = json.loads(data)
        except ValueError as e:
            LOGGER.warning("dropping malformed message: %s", e)
            return None
        if not isinstance(message, dict):
            LOGGER.warning("dropping non-object message of type %s", type(message).__name__)
            return None
        return self.process_message(message)

    def process_message(self, message: Mapping[str, Any]) -> DecodedTransaction | None:
        """Process one parsed message; returns the transaction if it passed all filters."""
        d = self.dispatcher
        d.message.publish(dict(message))

        if "error" in message:
            err = message["error"]
            msg = err.get("message") if isinstance(err, Mapping) else str(err)
            LOGGER.warning("node returned an error: %s", msg)
            d.error.publish(RuntimeError(f"RPC error: {msg}"))
            return None

        if self.exclude_unwanted_events and contains_unwanted_events(message, self.unwanted_event_keys):
            LOGGER.debug("dropping unwanted oracle message")
            return None

        if is_subscription_confirmation(message):
            d.subscription_confirmed.publish(dict(message))
            return None

        tx = self.decode_message(message)
        if tx is None:
            return None
        d.tx.publish(tx)

        final = self.evaluate(tx)
        if final is None:
            return None

        d.filtered_tx.publish(final)
        if final.has_tier(FilterTier.WASM_CONTRACT):
            d.wasm_tx.publish(final)
        if final.has_tier(FilterTier.WALLET_ADDRESS):
            d.wallet_tx.publish(final)
        if is_staking_tx(final):
            d.staking_tx.publish(final)
        return final

    def messaging_data(self, tx: DecodedTransaction) -> list[MessageSummary]:
        return self.transformer.extract_messaging_data(tx)
