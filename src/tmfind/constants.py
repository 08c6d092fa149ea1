from __future__ import annotations

# event types (decoded)
MESSAGE_EVENT        = "message"
TRANSFER_EVENT       = "transfer"
TOKEN_SWAPPED_EVENT  = "token_swapped"
SEND_PACKET_EVENT    = "send_packet"
WITHDRAW_POS_EVENT   = "withdraw_position"
POOL_JOINED_EVENT    = "pool_joined"
POOL_EXITED_EVENT    = "pool_exited"

# port used by ICS-20 fungible token transfers
IBC_TRANSFER_PORT = "transfer"

# attribute keys that conventionally carry bech32 addresses
ADDRESS_KEYS: frozenset[str] = frozenset(
    {
        "sender",
        "recipient",
        "receiver",
        "delegator",
        "validator",
        "spender",
        "source_validator",
        "destination_validator",
    }
)

# wallet tier: roles inspected inside a qualifying message event
WALLET_ROLE_KEYS: tuple[str, ...] = ("sender", "recipient", "delegator", "validator", "spender")

# wallet tier: action prefixes that qualify a message event
WALLET_ACTION_PREFIXES: tuple[str, ...] = ("/cosmos.staking.", "/cosmos.distribution.", "/ibc.")

# actions that mark a staking notification
STAKING_ACTION_MARKERS: tuple[str, ...] = ("cosmos.staking", "cosmos.distribution")

# oracle feeder noise dropped before decoding
UNWANTED_EVENT_KEYS: tuple[str, ...] = ("aggregate_vote.exchange_rates",)

DEFAULT_SUBSCRIPTION_QUERY = "tm.event='Tx'"
UNNAMED_FILTER = "unnamed_filter"

DEFAULT_ENDPOINTS: dict[str, str] = {
    "cosmos": "wss://rpc.cosmos.network/websocket",
    "osmosis": "wss://rpc.osmosis.zone/websocket",
    "sei": "wss://sei-rpc.polkachu.com/websocket",
    "juno": "wss://rpc.juno.omniflix.co/websocket",
    "terra": "wss://terra-rpc.polkachu.com/websocket",
}
