#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
maskvault CLI - origin-scoped masks on the command line.

The CLI acts as a local host: it keeps the encrypted state file, derives keys
from the configured seed and asks for consent on the terminal. Commands that
websites would issue run as the origin given by ``--origin``; management
commands run as the application site.

Environment:
  MASKVAULT_SEED        Hex user seed (required)
  MASKVAULT_STATE_KEY   Fernet key of the state file (required)
  MASKVAULT_STATE_PATH  State file location
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..core.config import get_config
from ..core.exceptions import MaskVaultException
from ..core.logging import configure_logging
from .commands import COMMAND_MODULES
from .output import output_error

logger = logging.getLogger(__name__)


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="maskvault",
        description="Origin-scoped signing masks with consent-gated sharing",
    )
    parser.add_argument("--origin", help="Calling website origin (defaults to the application site)")
    parser.add_argument("--state", help="State file path (overrides MASKVAULT_STATE_PATH)")
    parser.add_argument("--yes", "-y", action="store_true", help="Answer yes to every consent prompt")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    try:
        configure_logging(level="DEBUG" if args.verbose else "WARNING")
        if args.origin is None:
            args.origin = get_config().site_origin
        return args.func(args)
    except MaskVaultException as e:
        output_error(e.message)
        logger.debug("Command failed", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
