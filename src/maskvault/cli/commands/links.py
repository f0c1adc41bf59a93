# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Link commands — share masks of the calling origin with other origins.

Commands:
    maskvault link <with-origin> --origin <origin>        Expose masks (asks for consent)
    maskvault unlink <with-origin> --origin <origin>      Withdraw masks (asks for consent)
    maskvault unlink --all --origin <origin>              Withdraw from every origin
    maskvault links --origin <origin>                     Origins the masks are exposed to
"""

from __future__ import annotations

import argparse

from ..output import output_error, output_result
from ..utils import origin_request, site_request


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register link commands."""
    link_p = subparsers.add_parser("link", help="Expose the calling origin's masks to another origin")
    link_p.add_argument("with_origin", help="Origin receiving access")
    link_p.set_defaults(func=cmd_link)

    unlink_p = subparsers.add_parser("unlink", help="Withdraw the calling origin's masks")
    unlink_p.add_argument("with_origin", nargs="?", help="Origin losing access")
    unlink_p.add_argument("--all", action="store_true", help="Withdraw from every origin (no prompt)")
    unlink_p.set_defaults(func=cmd_unlink)

    links_p = subparsers.add_parser("links", help="Origins the calling origin's masks are exposed to")
    links_p.set_defaults(func=cmd_links)


def cmd_link(args: argparse.Namespace) -> int:
    result = origin_request(args, {"method": "identity_link_request", "with_origin": args.with_origin})
    output_result(result)
    return 0 if result else 1


def cmd_unlink(args: argparse.Namespace) -> int:
    if args.all:
        result = site_request(args, {"method": "identity_unlink_all", "origin": args.origin})
    elif args.with_origin:
        result = origin_request(args, {"method": "identity_unlink_request", "with_origin": args.with_origin})
    else:
        output_error("Give an origin to unlink from, or --all")
        return 2
    output_result(result)
    return 0 if result else 1


def cmd_links(args: argparse.Namespace) -> int:
    output_result(origin_request(args, {"method": "identity_get_links"}))
    return 0
