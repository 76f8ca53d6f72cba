"""
Command line host for the indexer.

::

    python -m web3sync run --contracts deployed.json --rpc http://127.0.0.1:8545 --cache-path indexer.db
    python -m web3sync show --cache-path indexer.db
"""

from __future__ import annotations
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import List

from web3sync.config import IndexerConfig
from web3sync.contracts import DeployedContracts
from web3sync.greetings import GREETINGS, greeting_filter
from web3sync.records import RecordsRepo
from web3sync.service import IndexerService

logger = logging.getLogger("web3sync")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="web3sync", description="Index contract events into sqlite"
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="Index GreetingChanged events until interrupted")
    run.add_argument("--contracts", required=True, help="Path to deployed contracts json")
    run.add_argument("--contract-name", default="YourContract", help="Contract to index")
    run.add_argument("--rpc", help="Ethereum RPC uri (WEB3_PROVIDER_URI)")
    run.add_argument("--cache-path", help="Store database path (WEB3_CACHE_PATH)")
    run.add_argument("--network", help="Network identifier (WEB3_NETWORK)")
    run.add_argument(
        "--starting-block",
        help="Block number or `latest` (STARTING_BLOCK_NUMBER)",
    )

    show = commands.add_parser("show", help="Print indexed greetings as json")
    show.add_argument("--cache-path", help="Store database path (WEB3_CACHE_PATH)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.command == "run":
            return asyncio.run(_run(args))
        return _show(args)
    except (ValueError, KeyError, OSError) as e:
        logger.error("%s", e)
        return 2


async def _run(args: argparse.Namespace) -> int:
    config = IndexerConfig(
        rpc=args.rpc,
        cache_path=args.cache_path,
        network=args.network,
        starting_block=args.starting_block,
    )
    service = IndexerService(config)
    if not service.initialized:
        return 1
    contracts = DeployedContracts.from_path(args.contracts, config.network)
    repo = service.add_record_kind(GREETINGS)
    service.register(greeting_filter(contracts, repo, args.contract_name))
    if not await service.start():
        service.close()
        return 1

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    await stop.wait()

    stopped = await service.stop()
    service.close()
    return 0 if stopped else 1


def _show(args: argparse.Namespace) -> int:
    repo = RecordsRepo(GREETINGS, cache_path=args.cache_path)
    repo.ensure_schema()
    events = [r.to_dict() for r in repo.query_all()]
    json.dump({"events": events, "total": len(events)}, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
