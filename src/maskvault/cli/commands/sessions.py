# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Session commands — log in and out, sign as the worn mask.

Commands:
    maskvault login <origin> <id> [--from <origin>]     Log in with a mask
    maskvault options <origin>                          List login options
    maskvault logout --origin <origin>                  Ask to log out
    maskvault status --origin <origin>                  Whether a session exists
    maskvault sign <hex> --origin <origin>              Sign a challenge
    maskvault pubkey --origin <origin>                  Public key of the worn mask
"""

from __future__ import annotations

import argparse

from ..output import output_result
from ..utils import origin_request, site_request


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register session commands."""
    login_p = subparsers.add_parser("login", help="Log in to an origin with a mask")
    login_p.add_argument("to_origin", help="Origin to log in to")
    login_p.add_argument("identity_id", type=int, help="Mask index")
    login_p.add_argument("--from", dest="derivation_origin", help="Use a mask of this linked origin")
    login_p.set_defaults(func=cmd_login)

    options_p = subparsers.add_parser("options", help="List masks usable on an origin")
    options_p.add_argument("for_origin", help="Origin")
    options_p.set_defaults(func=cmd_options)

    logout_p = subparsers.add_parser("logout", help="Log out of the calling origin")
    logout_p.set_defaults(func=cmd_logout)

    status_p = subparsers.add_parser("status", help="Whether the calling origin is logged in")
    status_p.set_defaults(func=cmd_status)

    sign_p = subparsers.add_parser("sign", help="Sign a hex challenge as the calling origin")
    sign_p.add_argument("challenge", help="Hex-encoded challenge")
    sign_p.add_argument("--salt", help="Hex-encoded custom salt")
    sign_p.set_defaults(func=cmd_sign)

    pubkey_p = subparsers.add_parser("pubkey", help="Public key of the calling origin's mask")
    pubkey_p.add_argument("--salt", help="Hex-encoded custom salt")
    pubkey_p.set_defaults(func=cmd_pubkey)


def cmd_login(args: argparse.Namespace) -> int:
    payload = {
        "method": "identity_login",
        "to_origin": args.to_origin,
        "with_identity_id": args.identity_id,
        "with_derivation_origin": args.derivation_origin,
    }
    output_result(site_request(args, payload))
    return 0


def cmd_options(args: argparse.Namespace) -> int:
    output_result(site_request(args, {"method": "identity_get_login_options", "for_origin": args.for_origin}))
    return 0


def cmd_logout(args: argparse.Namespace) -> int:
    result = origin_request(args, {"method": "identity_logout_request"})
    output_result(result)
    return 0 if result else 1


def cmd_status(args: argparse.Namespace) -> int:
    output_result(origin_request(args, {"method": "identity_session_exists"}))
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    output_result(origin_request(args, {"method": "identity_sign", "challenge": args.challenge, "salt": args.salt}))
    return 0


def cmd_pubkey(args: argparse.Namespace) -> int:
    output_result(origin_request(args, {"method": "identity_get_public_key", "salt": args.salt}))
    return 0
