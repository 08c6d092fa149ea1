"""Osmosis transformer: adds GAMM swap and liquidity-pool summaries."""

from __future__ import annotations

from tmfind.constants import POOL_EXITED_EVENT, POOL_JOINED_EVENT, TOKEN_SWAPPED_EVENT
from tmfind.core.config import ChainType
from tmfind.core.models import DecodedTransaction
from tmfind.transformers.base import GenericTransformer, MessageSummary
from tmfind.transformers.registry import register_transformer


@register_transformer(ChainType.OSMOSIS)
class OsmosisTransformer(GenericTransformer):
    def extract_messaging_data(self, tx: DecodedTransaction) -> list[MessageSummary]:
        summaries = super().extract_messaging_data(tx)
        for ev in tx.events:
            if ev.type == TOKEN_SWAPPED_EVENT:
                # attribute names differ between releases
                token_in = ev.first("tokens_in") or ev.first("token_in")
                token_out = ev.first("tokens_out") or ev.first("token_out")
                if token_in and token_out:
                    summaries.append(
                        MessageSummary(
                            message_type="swap",
                            action=TOKEN_SWAPPED_EVENT,
                            module="gamm",
                            sender=ev.first("sender"),
                            metadata={
                                "token_in": token_in,
                                "token_out": token_out,
                                "pool_id": ev.first("pool_id") or "",
                                "module_account": ev.first("module_account") or "",
                            },
                        )
                    )
            elif ev.type in (POOL_JOINED_EVENT, POOL_EXITED_EVENT):
                pool_id = ev.first("pool_id")
                if pool_id:
                    summaries.append(
                        MessageSummary(
                            message_type=ev.type,
                            action=ev.type,
                            module="gamm",
                            sender=ev.first("sender"),
                            metadata={"pool_id": pool_id, "tokens": list(ev.values("tokens"))},
                        )
                    )
        return summaries
