#!/usr/bin/env python3
"""
Run the cycle arbitrage engine.

Polls every enabled network's pool cycles and strikes when a cycle clears
its profit threshold.

MODES:
  1. Paper (default): Detect and log opportunities, never build strikes
  2. Dry Run: Build strike transactions and log them, never broadcast
  3. Live: Sign and broadcast strikes (REQUIRES each network's private key)

Usage:
  # Paper mode
  python run_strike.py --config configs/networks.example.yaml

  # Dry run
  python run_strike.py --config configs/networks.example.yaml --dry-run

  # Live (spends gas)
  export PRIVATE_KEY="0x..."
  python run_strike.py --config configs/networks.example.yaml --live

Environment Variables:
  PORT: Health endpoint port (default: 8080)
  <rpc_url_env>, <executor_address_env>, <private_key_env>: per network, as
  named in the config file
"""

import argparse
import asyncio
import logging
import os
import sys
from functools import partial

import uvicorn
from dotenv import load_dotenv

import logging_config
from cycle_arbitrage.config import load_config
from cycle_arbitrage.exceptions import ConfigurationError
from cycle_arbitrage.health import create_health_app
from cycle_arbitrage.scheduler import Scheduler, build_worker
from cycle_arbitrage.version import __version__

logger = logging.getLogger("run_strike")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Cycle Arbitrage Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to networks config YAML file",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--paper",
        action="store_true",
        help="Paper mode (detect only, no strikes) [DEFAULT]",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (build strikes, never broadcast)",
    )
    mode_group.add_argument(
        "--live",
        action="store_true",
        help="Live mode (sign and broadcast strikes)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8080")),
        help="Health endpoint port (default: $PORT or 8080)",
    )
    parser.add_argument(
        "--no-health",
        action="store_true",
        help="Do not start the health endpoint",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle per network and exit",
    )
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging (every no-signal pulse)",
    )
    log_group.add_argument(
        "--quiet",
        action="store_true",
        help="Only warnings and errors",
    )

    return parser.parse_args(argv)


def get_mode(args) -> str:
    if args.live:
        return "live"
    if args.dry_run:
        return "dry_run"
    return "paper"


async def serve(scheduler: Scheduler, args) -> None:
    """Run the scheduler, plus the health endpoint unless disabled."""
    if args.once:
        results = await scheduler.run_once()
        for name, outcomes in results.items():
            logger.info(f"[{name}] {', '.join(o.value for o in outcomes) or 'no outcome'}")
        return

    if args.no_health:
        await scheduler.run()
        return

    server = uvicorn.Server(
        uvicorn.Config(
            create_health_app(scheduler),
            host="0.0.0.0",
            port=args.port,
            log_level="warning",
        )
    )
    logger.info(f"Health endpoint on port {args.port}")

    scheduler_task = asyncio.create_task(scheduler.run())
    try:
        await server.serve()
    finally:
        await scheduler.stop()
        await scheduler_task


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    load_dotenv()

    if args.debug:
        logging_config.setup_debug()
    elif args.quiet:
        logging_config.setup_minimal()
    else:
        logging_config.setup()

    mode = get_mode(args)
    logger.info(f"Cycle Arbitrage Engine v{__version__} | mode: {mode.upper()}")

    try:
        config = load_config(args.config)
        scheduler = Scheduler(
            config.networks,
            worker_factory=partial(
                build_worker,
                mode=mode,
                rpc_timeout_sec=config.rpc_timeout_sec,
                simulate_strikes=config.simulate_strikes,
            ),
        )
        scheduler.build_workers()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        await serve(scheduler, args)
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
        await scheduler.stop()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
