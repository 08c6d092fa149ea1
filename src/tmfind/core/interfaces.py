from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tmfind.core.config import ChainInfo
from tmfind.core.models import DecodedTransaction

if TYPE_CHECKING:
    from tmfind.transformers.base import MessageSummary


# ---------------------------------------------------------------------------
# IChainTransformer
# ---------------------------------------------------------------------------

@runtime_checkable
class IChainTransformer(Protocol):
    """
    Chain-specific post-processing of decoded transactions.

    Domain expectations:
    - `transform_events` returns a transaction (the same one when nothing changes).
    - `extract_messaging_data` is read-only and never raises on missing attributes.
    """

    def get_chain_info(self) -> ChainInfo:
        """Return the chain constants this transformer was built with."""
        ...

    def transform_events(self, tx: DecodedTransaction) -> DecodedTransaction:
        """
        Reshape or extend the decoded event set.

        Implementations:
        - Identity (generic chains)
        - Chains that split or merge module-specific events
        """
        ...

    def extract_messaging_data(self, tx: DecodedTransaction) -> list[MessageSummary]:
        """Summarize the transaction's messages in a chain-aware way."""
        ...


# ---------------------------------------------------------------------------
# IMessageConnection
# ---------------------------------------------------------------------------

@runtime_checkable
class IMessageConnection(Protocol):
    """
    A live, message-oriented connection to a node's subscription endpoint.

    Domain expectations:
    - Frames are whole JSON documents (text or bytes).
    - Iteration ends when the peer closes the connection.
    - Reconnection is the caller's responsibility.
    """

    async def send(self, message: str) -> None:
        ...

    async def recv(self) -> str | bytes:
        ...

    async def close(self) -> None:
        ...

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        ...
