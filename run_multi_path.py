#!/usr/bin/env python3
"""
Multi-path DEX arbitrage monitor CLI.

Builds a token graph from every configured pool, searches it for negative
cycles through the base token each block, and reports the best route.

Usage:
    python3 run_multi_path.py
    python3 run_multi_path.py --config configs/mantle.yaml --once
    python3 run_multi_path.py --strategy balanced_risk_return --verbose
"""

import argparse
import sys

import logging_config
from cycle_arbitrage.constants import OptimizationStrategy
from dex.config import ConfigError, DexConfig, load_config
from dex.runner import MultiPathRunner

DEFAULT_CONFIG = "configs/mantle.yaml"


def build_parser(description: str) -> argparse.ArgumentParser:
    """Arguments shared by the monitor CLIs."""
    parser = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to config YAML file (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass and exit (overrides config setting)",
    )

    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in OptimizationStrategy],
        help="Selection strategy (overrides config setting)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def load_cli_config(args: argparse.Namespace) -> DexConfig:
    """
    Load config and apply command line overrides.

    Raises:
        ConfigError: If the config is invalid
    """
    config = load_config(args.config)
    if args.once:
        config.once = True
    if args.strategy:
        config.strategy = OptimizationStrategy(args.strategy)
    return config


def run_monitor(runner_cls, args: argparse.Namespace) -> int:
    """
    Load config, start a runner and drive it until done.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.verbose:
        logging_config.setup_debug()
    else:
        logging_config.setup()

    try:
        config = load_cli_config(args)
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1

    try:
        runner = runner_cls(config)
        runner.load_pools()
        runner.connect()
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Initialization failed: {e}", file=sys.stderr)
        return 1

    try:
        runner.run()
    except KeyboardInterrupt:
        print("\n\n⏸ Stopped by user")
        return 0
    except Exception as e:
        print(f"❌ Runner failed: {e}", file=sys.stderr)
        return 1

    return 0


def main() -> int:
    args = build_parser("Multi-path DEX arbitrage monitor").parse_args()
    return run_monitor(MultiPathRunner, args)


if __name__ == "__main__":
    sys.exit(main())
