"""
CLI entry point for suiparse.

Usage:
    suiparse parse TX_DIGEST --rpc-url mainnet
    suiparse parse --file transaction.json
    suiparse bag TX_DIGEST BAG_ID --concurrency 4 -o changes.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .core.client import TxParseClient
from .core.config import RpcConfig
from .logging_config import setup_logging
from .parser.models import DynamicFieldBalanceChange, ParseResult
from .parser.transaction import parse_transaction_value

console = Console()


ENV_SEARCH_DEPTH = 5


def load_env(start: Optional[Path] = None) -> Optional[Path]:
    """
    Read SUI_* defaults from the nearest .env file at or above start.

    Variables already set in the environment win. Returns the file that
    was read, if any.
    """
    directory = start or Path.cwd()
    for candidate in [directory, *directory.parents][:ENV_SEARCH_DEPTH]:
        env_file = candidate / ".env"
        if not env_file.is_file():
            continue
        for line in env_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip().strip("\"'"))
        return env_file
    return None


def build_config(args: argparse.Namespace) -> RpcConfig:
    """Environment first, command line flags override."""
    config = RpcConfig.from_env()
    if getattr(args, "rpc_url", None):
        config = RpcConfig(args.rpc_url, config.timeout, config.max_concurrency)
    if getattr(args, "concurrency", None) is not None:
        config = RpcConfig(config.rpc_url, config.timeout, args.concurrency)
    return config


def format_amount(raw: str, decimals: int) -> str:
    """Scale a raw integer amount by its decimals for display."""
    if decimals == 0:
        return raw
    return format(Decimal(raw).scaleb(-decimals), "f")


def write_output(path: str, data) -> None:
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    console.print(f"\n[dim]Results exported to: {path}[/dim]")


def print_parse_result(result: ParseResult) -> None:
    table = Table(title="Balance Changes")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Coin Type", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Owner")

    for i, change in enumerate(result.balance_changes, 1):
        style = "red" if change.amount.startswith("-") else "green"
        table.add_row(str(i), change.coin_type, f"[{style}]{change.amount}[/{style}]", change.owner)

    console.print(table)

    gas = result.gas_cost
    console.print("\n[bold]Gas Cost:[/bold]")
    console.print(f"  computation: {gas.computation_cost}")
    console.print(f"  storage: {gas.storage_cost}")
    console.print(f"  rebate: {gas.storage_rebate}")
    console.print(f"  non-refundable fee: {gas.non_refundable_storage_fee}")


def print_bag_changes(changes: List[DynamicFieldBalanceChange]) -> None:
    if not changes:
        console.print("[dim]No balance-bearing bag members changed[/dim]")
        return

    table = Table(title="Bag Balance Changes")
    table.add_column("Coin Type", style="cyan")
    table.add_column("Previous", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("Decimals", justify="right", style="dim")

    for change in changes:
        sign = "" if change.value_diff.startswith("-") else "+"
        table.add_row(
            change.coin_type,
            format_amount(change.previous_value, change.decimals),
            format_amount(change.current_value, change.decimals),
            f"{sign}{format_amount(change.value_diff, change.decimals)}",
            str(change.decimals),
        )

    console.print(table)


def run_parse(args: argparse.Namespace) -> int:
    """Parse balance changes and gas cost of one transaction."""
    load_env()

    if args.file:
        try:
            with open(args.file) as f:
                raw = json.load(f)
            # Accept a full JSON-RPC envelope as well as a bare result
            if isinstance(raw, dict) and "result" in raw and "jsonrpc" in raw:
                raw = raw["result"]
            result = parse_transaction_value(raw)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1
    elif args.digest:
        async def _run():
            async with TxParseClient.from_config(build_config(args)) as client:
                return await client.parse_transaction(args.digest)

        try:
            result = asyncio.run(_run())
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1
    else:
        console.print("[red]Error: pass a transaction digest or --file[/red]")
        return 1

    print_parse_result(result)

    if args.output:
        write_output(args.output, result.to_dict())
    return 0


def run_bag(args: argparse.Namespace) -> int:
    """Reconstruct balance changes of a bag's dynamic fields."""
    load_env()

    async def _run():
        config = build_config(args)
        async with TxParseClient.from_config(config) as client:
            return await client.get_bag_dynamic_field_balance_changes(args.digest, args.bag_id)

    try:
        changes = asyncio.run(_run())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    print_bag_changes(changes)

    if args.output:
        write_output(args.output, [c.to_dict() for c in changes])
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="suiparse",
        description="Parse Sui transaction balance changes",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse balance changes and gas cost")
    parse_parser.add_argument("digest", type=str, nargs="?", help="Transaction digest")
    parse_parser.add_argument(
        "--file", "-f",
        type=str,
        help="Parse a saved sui_getTransactionBlock response instead of fetching"
    )
    parse_parser.add_argument(
        "--rpc-url", "-r",
        type=str,
        help="RPC URL or network name (default: $SUI_RPC_URL or mainnet)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file for JSON results"
    )

    # bag command
    bag_parser = subparsers.add_parser("bag", help="Balance changes inside a bag")
    bag_parser.add_argument("digest", type=str, help="Transaction digest")
    bag_parser.add_argument("bag_id", type=str, help="Bag object id")
    bag_parser.add_argument(
        "--rpc-url", "-r",
        type=str,
        help="RPC URL or network name (default: $SUI_RPC_URL or mainnet)"
    )
    bag_parser.add_argument(
        "--concurrency", "-c",
        type=int,
        help="Bag members processed at once (default: $SUI_MAX_CONCURRENCY or 1)"
    )
    bag_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file for JSON results"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "parse":
        return run_parse(args)
    elif args.command == "bag":
        return run_bag(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
