# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Mask commands — create, list and rename masks.

Commands:
    maskvault masks add <origin>                         Create a new mask on an origin
    maskvault masks list                                 List every origin with its masks
    maskvault masks rename <origin> <id> <pseudonym>     Rename a mask
"""

from __future__ import annotations

import argparse

from ..output import output_result
from ..utils import site_request


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the masks sub-command group."""
    masks_parser = subparsers.add_parser("masks", help="Manage masks")
    masks_sub = masks_parser.add_subparsers(dest="masks_command", required=True)

    add_p = masks_sub.add_parser("add", help="Create a new mask on an origin")
    add_p.add_argument("to_origin", help="Website origin")
    add_p.set_defaults(func=cmd_masks_add)

    list_p = masks_sub.add_parser("list", help="List every origin with its masks")
    list_p.set_defaults(func=cmd_masks_list)

    rename_p = masks_sub.add_parser("rename", help="Rename a mask")
    rename_p.add_argument("origin", help="Website origin")
    rename_p.add_argument("identity_id", type=int, help="Mask index")
    rename_p.add_argument("pseudonym", help="New pseudonym")
    rename_p.set_defaults(func=cmd_masks_rename)


def cmd_masks_add(args: argparse.Namespace) -> int:
    output_result(site_request(args, {"method": "identity_add", "to_origin": args.to_origin}))
    return 0


def cmd_masks_list(args: argparse.Namespace) -> int:
    output_result(site_request(args, {"method": "state_get_all_origin_data"}))
    return 0


def cmd_masks_rename(args: argparse.Namespace) -> int:
    payload = {
        "method": "identity_edit_pseudonym",
        "origin": args.origin,
        "identity_id": args.identity_id,
        "new_pseudonym": args.pseudonym,
    }
    output_result(site_request(args, payload))
    return 0
