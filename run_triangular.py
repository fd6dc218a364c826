#!/usr/bin/env python3
"""
Fixed-triangle DEX arbitrage monitor CLI.

Evaluates the configured base -> mid -> alt -> base triangle each block.

Usage:
    python3 run_triangular.py --config configs/mantle.yaml
    python3 run_triangular.py --config configs/mantle.yaml --once
"""

import sys

from dex.runner import TriangularRunner
from run_multi_path import build_parser, run_monitor


def main() -> int:
    args = build_parser("Fixed-triangle DEX arbitrage monitor").parse_args()
    return run_monitor(TriangularRunner, args)


if __name__ == "__main__":
    sys.exit(main())
