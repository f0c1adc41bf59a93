# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Stats command — per-origin request counters."""

from __future__ import annotations

import argparse

from ..output import output_result
from ..utils import site_request


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the stats command."""
    stats_p = subparsers.add_parser("stats", help="Show request statistics")
    stats_p.add_argument("--reset", action="store_true", help="Reset the counters")
    stats_p.set_defaults(func=cmd_stats)


def cmd_stats(args: argparse.Namespace) -> int:
    method = "statistics_reset" if args.reset else "statistics_get"
    output_result(site_request(args, {"method": method}))
    return 0
