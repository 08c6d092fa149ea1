from tmfind.clients.rpc import RPC, normalize_tx_hash, wrap_tx_result
from tmfind.clients.ws import StreamClient, subscribe_request

__all__ = [
    "RPC",
    "StreamClient",
    "normalize_tx_hash",
    "subscribe_request",
    "wrap_tx_result",
]
