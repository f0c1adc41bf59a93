"""Utility functions for the maskvault CLI."""

from __future__ import annotations

import argparse
import logging
from typing import Any

from ..consent import StaticConsent, TerminalConsent
from ..core.config import get_config
from ..identity.keys import SeedEntropySource
from ..protocols.context import RequestContext
from ..protocols.router import handle_request
from ..storage.backend import EncryptedFileStateStore

logger = logging.getLogger(__name__)


def build_context(args: argparse.Namespace) -> RequestContext:
    """Wire the local collaborators from configuration."""
    config = get_config()
    store = EncryptedFileStateStore(getattr(args, "state", None) or config.state_path, config.state_key_bytes)
    consent = StaticConsent(answer=True) if getattr(args, "yes", False) else TerminalConsent()
    return RequestContext(
        store=store,
        entropy=SeedEntropySource(config.seed),
        consent=consent,
        settings=config,
    )


def site_request(args: argparse.Namespace, payload: dict[str, Any]) -> Any:
    """Run a request as the application site."""
    ctx = build_context(args)
    return handle_request(ctx.site_origin, payload, ctx)


def origin_request(args: argparse.Namespace, payload: dict[str, Any]) -> Any:
    """Run a request as the website given by ``--origin``."""
    ctx = build_context(args)
    return handle_request(args.origin, payload, ctx)
