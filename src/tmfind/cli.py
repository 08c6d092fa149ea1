from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from tmfind.constants import DEFAULT_SUBSCRIPTION_QUERY
from tmfind.core.config import ChainType, EventFilter, FilterConfig, StreamConfig
from tmfind.core.models import DecodedTransaction
from tmfind.filters.advanced import AdvancedFilter
from tmfind.filters.loader import FilterLoadError, load_filter_config, load_filter_files
from tmfind.pipeline.processor import TxPipeline

console = Console()
err_console = Console(stderr=True)

LOGGER = logging.getLogger("tmfind")


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _parse_filter_specs(specs: tuple[str, ...]) -> dict[str, str]:
    out: dict[str, str] = {}
    for spec in specs:
        key, sep, path = spec.partition("=")
        if not sep or not key or not path:
            raise click.BadParameter(f"expected KEY=PATH, got {spec!r}", param_hint="--filter")
        out[key.strip()] = path.strip()
    return out


def _build_filters(
    config_path: str,
    filter_specs: tuple[str, ...],
    wallets: tuple[str, ...],
    contracts: tuple[str, ...],
    event_types: tuple[str, ...],
) -> tuple[FilterConfig, list[AdvancedFilter]]:
    """Filter config from an optional document plus CLI additions."""
    try:
        if config_path:
            base, advanced = load_filter_config(config_path)
        else:
            base, advanced = FilterConfig(), []
        lists = load_filter_files(_parse_filter_specs(filter_specs))
    except FilterLoadError as e:
        raise click.ClickException(str(e)) from e

    cfg = base.with_attribute_lists(lists) if lists else base
    event_filters = cfg.event_filters + ((EventFilter.of(types=event_types),) if event_types else ())
    cfg = FilterConfig(
        attribute_lists=cfg.attribute_lists,
        wallet_addresses=cfg.wallet_addresses | frozenset(wallets),
        wasm_contracts=cfg.wasm_contracts | frozenset(contracts),
        event_filters=event_filters,
    )
    return cfg, advanced


def _json_default(o: Any) -> Any:
    if isinstance(o, (set, frozenset)):
        return sorted(o)
    if isinstance(o, Enum):
        return o.value
    raise TypeError(f"not JSON serializable: {type(o).__name__}")


def tx_to_json(tx: DecodedTransaction) -> str:
    return json.dumps(asdict(tx), default=_json_default, sort_keys=True)


def _render(pipeline: TxPipeline, tx: DecodedTransaction, as_json: bool) -> None:
    if as_json:
        click.echo(tx_to_json(tx))
        return
    tiers = ",".join(m.tier.value for m in tx.matched_filters) or "-"
    kind = tx.tx_type.value if tx.tx_type else "unknown"
    console.print(
        f"[bold]{tx.height}[/] {tx.tx_hash or '<no hash>'} "
        f"[cyan]{kind}[/] gas={tx.gas_used}/{tx.gas_wanted} [green]filters[/]={tiers}"
    )
    for m in pipeline.messaging_data(tx):
        amount = ", ".join(c.display_amount or f"{c.amount}{c.denom}" for c in m.amount or [])
        console.print(
            f"    {m.module}.{m.action} {m.sender or '?'} -> {m.recipient or m.contract_address or '?'}"
            + (f" [yellow]{amount}[/]" if amount else "")
        )


def _read_messages(path: Path) -> list[str | dict[str, Any]]:
    """A JSON array/object file, or NDJSON (one message per line)."""
    text = path.read_text(encoding="utf-8")
    try:
        doc = json.loads(text)
    except ValueError:
        return [line for line in text.splitlines() if line.strip()]
    if isinstance(doc, list):
        return doc
    return [doc]


def filter_options(f):
    """Filter options shared by `stream` and `decode`."""
    options = [
        click.option("--chain", default="generic", show_default=True, help="Chain type (generic, cosmos, osmosis, sei, juno, terra)"),
        click.option("--config", "config_path", type=str, default="", help="Filter config JSON document"),
        click.option("--filter", "filter_specs", multiple=True, help="Attribute list as KEY=PATH (JSON array); repeatable"),
        click.option("--wallet", "wallets", multiple=True, help="Wallet address to watch; repeatable"),
        click.option("--contract", "contracts", multiple=True, help="Wasm contract address to watch; repeatable"),
        click.option("--event-type", "event_types", multiple=True, help="Require an event of this type; repeatable to OR"),
        click.option(
            "--include-unwanted/--exclude-unwanted",
            default=False,
            show_default=True,
            help="Keep oracle vote messages instead of dropping them",
        ),
        click.option("--json", "as_json", is_flag=True, default=False, help="Print matched transactions as NDJSON"),
        click.option("--debug", is_flag=True, default=False, help="Verbose logging"),
    ]
    for opt in reversed(options):
        f = opt(f)
    return f


@click.group()
def cli() -> None:
    """tmfind: decode and filter Tendermint transaction events."""


@cli.command("stream")
@click.option("--ws", "ws_endpoint", type=str, default="", help="Websocket endpoint (defaults to the chain's public one)")
@click.option("--query", type=str, default=DEFAULT_SUBSCRIPTION_QUERY, show_default=True, help="Subscription query")
@click.option("--max-reconnect", type=int, default=5, show_default=True, help="Reconnect attempts before giving up")
@click.option("--reconnect-delay", type=float, default=5.0, show_default=True, help="Seconds between reconnects")
@filter_options
def stream_cmd(
    ws_endpoint: str,
    query: str,
    max_reconnect: int,
    reconnect_delay: float,
    chain: str,
    config_path: str,
    filter_specs: tuple[str, ...],
    wallets: tuple[str, ...],
    contracts: tuple[str, ...],
    event_types: tuple[str, ...],
    include_unwanted: bool,
    as_json: bool,
    debug: bool,
) -> None:
    """Subscribe to a node and print transactions that pass the filters."""
    _setup_logging(debug)
    chain_type = ChainType.parse(chain)
    filter_config, advanced = _build_filters(config_path, filter_specs, wallets, contracts, event_types)

    config = StreamConfig.for_chain(
        chain_type,
        ws_endpoint=ws_endpoint or None,
        subscription_query=query,
        max_reconnect_attempts=max_reconnect,
        reconnect_delay_s=reconnect_delay,
        exclude_unwanted_events=not include_unwanted,
    )
    pipeline = TxPipeline.from_config(
        filter_config,
        advanced,
        chain_type=chain_type,
        exclude_unwanted_events=config.exclude_unwanted_events,
        unwanted_event_keys=config.unwanted_event_keys,
    )
    pipeline.dispatcher.filtered_tx.subscribe(lambda tx: _render(pipeline, tx, as_json))

    from tmfind.clients.ws import StreamClient

    client = StreamClient(config, pipeline)
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        err_console.print("[bold]stopped[/]")


@cli.command("decode")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@filter_options
def decode_cmd(
    path: Path,
    chain: str,
    config_path: str,
    filter_specs: tuple[str, ...],
    wallets: tuple[str, ...],
    contracts: tuple[str, ...],
    event_types: tuple[str, ...],
    include_unwanted: bool,
    as_json: bool,
    debug: bool,
) -> None:
    """Replay captured subscription messages (JSON array or NDJSON) through the pipeline."""
    _setup_logging(debug)
    filter_config, advanced = _build_filters(config_path, filter_specs, wallets, contracts, event_types)
    pipeline = TxPipeline.from_config(
        filter_config,
        advanced,
        chain_type=ChainType.parse(chain),
        exclude_unwanted_events=not include_unwanted,
    )

    decoded = 0

    def count(_: DecodedTransaction) -> None:
        nonlocal decoded
        decoded += 1

    pipeline.dispatcher.tx.subscribe(count)
    pipeline.dispatcher.filtered_tx.subscribe(lambda tx: _render(pipeline, tx, as_json))

    messages = _read_messages(path)
    matched = 0
    for msg in messages:
        if isinstance(msg, dict):
            tx = pipeline.process_message(msg)
        elif isinstance(msg, str):
            tx = pipeline.process_raw(msg)
        else:
            LOGGER.warning("skipping non-object entry of type %s", type(msg).__name__)
            continue
        if tx is not None:
            matched += 1

    if not as_json:
        console.print(f"[bold]summary[/]: messages={len(messages)}  decoded={decoded}  [green]matched[/]={matched}")


@cli.command("fetch-tx")
@click.option("--rpc", required=True, help="RPC endpoint URL")
@click.option("--hash", "tx_hash", required=True, help="Transaction hash (hex)")
@click.option("--chain", default="generic", show_default=True, help="Chain type")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the decoded transaction as JSON")
@click.option("--debug", is_flag=True, default=False, help="Verbose logging")
def fetch_tx_cmd(rpc: str, tx_hash: str, chain: str, as_json: bool, debug: bool) -> None:
    """Fetch one transaction over HTTP RPC and print it decoded (no filtering)."""
    _setup_logging(debug)

    import httpx

    from tmfind.clients.rpc import RPC

    pipeline = TxPipeline.from_config(chain_type=ChainType.parse(chain), exclude_unwanted_events=False)

    async def run() -> dict[str, Any]:
        client = RPC(rpc)
        try:
            return await client.get_tx(tx_hash)
        finally:
            await client.aclose()

    try:
        message = asyncio.run(run())
    except (RuntimeError, httpx.HTTPError) as e:
        raise click.ClickException(str(e)) from e

    tx = pipeline.decode_message(message)
    if tx is None:
        raise click.ClickException(f"no transaction found in response for {tx_hash}")
    _render(pipeline, tx, as_json)


if __name__ == "__main__":
    cli()
