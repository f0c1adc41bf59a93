"""Identity request handlers.

Each handler runs exactly one state transaction: the state is loaded when the
request starts and persisted once at the end if anything changed. Errors
raised inside the transaction leave the stored state untouched.

Protected handlers serve the application site and never prompt (the site is
the user's own interface). Public handlers serve arbitrary websites; the ones
that expose or withdraw masks ask for consent first.
"""

from __future__ import annotations

import logging
from typing import Any

from maskvault.consent import link_prompt, logout_prompt, unlink_prompt
from maskvault.core.exceptions import InvalidInputError
from maskvault.identity.keys import derive_key_pair
from maskvault.identity.models import Origin
from maskvault.protocols.context import RequestContext
from maskvault.protocols.requests import (
    IdentityAddRequest,
    IdentityEditPseudonymRequest,
    IdentityGetLinksRequest,
    IdentityGetLoginOptionsRequest,
    IdentityGetPublicKeyRequest,
    IdentityLinkRequest,
    IdentityLoginRequest,
    IdentityLogoutRequest,
    IdentitySessionExistsRequest,
    IdentitySignRequest,
    IdentityStopSessionRequest,
    IdentityUnlinkAllRequest,
    IdentityUnlinkOneRequest,
    IdentityUnlinkRequest,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protected
# ---------------------------------------------------------------------------


def handle_identity_add(request: IdentityAddRequest, origin: Origin, ctx: RequestContext) -> dict[str, Any]:
    """Create a new mask on ``request.to_origin`` and return it."""
    with ctx.transaction() as manager:
        identity_id = manager.add_identity(request.to_origin)
        manager.increment_stats(request.to_origin)
        mask = manager.sessions.mask(request.to_origin, identity_id)
    return mask.to_dict()


def handle_identity_login(request: IdentityLoginRequest, origin: Origin, ctx: RequestContext) -> bool:
    with ctx.transaction() as manager:
        manager.login(request.to_origin, request.with_identity_id, request.with_derivation_origin)
        manager.increment_stats(request.to_origin)
    return True


def handle_identity_get_login_options(
    request: IdentityGetLoginOptionsRequest, origin: Origin, ctx: RequestContext
) -> list[list[Any]]:
    """Masks usable on an origin: its own first, then those of linked origins."""
    with ctx.transaction() as manager:
        manager.increment_stats(request.for_origin)
        groups = manager.sessions.login_options(request.for_origin)
    return [[source, [key.hex() for key in keys]] for source, keys in groups]


def handle_identity_edit_pseudonym(
    request: IdentityEditPseudonymRequest, origin: Origin, ctx: RequestContext
) -> bool:
    with ctx.transaction() as manager:
        manager.edit_pseudonym(request.origin, request.identity_id, request.new_pseudonym)
    return True


def handle_identity_stop_session(request: IdentityStopSessionRequest, origin: Origin, ctx: RequestContext) -> bool:
    """End the session on an origin; returns whether there was one."""
    with ctx.transaction() as manager:
        return manager.logout(request.origin)


def handle_identity_unlink_one(request: IdentityUnlinkOneRequest, origin: Origin, ctx: RequestContext) -> bool:
    with ctx.transaction() as manager:
        return manager.unlink(request.origin, request.with_origin)


def handle_identity_unlink_all(request: IdentityUnlinkAllRequest, origin: Origin, ctx: RequestContext) -> bool:
    with ctx.transaction() as manager:
        removed = manager.unlink_all(request.origin)
    return bool(removed)


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def handle_identity_sign(request: IdentitySignRequest, origin: Origin, ctx: RequestContext) -> str:
    """Sign the challenge with the calling origin's mask; returns hex ``r || s``."""
    with ctx.transaction() as manager:
        session = manager.sessions.effective_session(origin, ctx.site_origin)
        key_pair = derive_key_pair(
            manager.entropy,
            session.derivation_origin,
            session.identity_id,
            custom_salt=request.salt,
        )
        manager.increment_stats(origin)
    return key_pair.sign(request.challenge).hex()


def handle_identity_get_public_key(
    request: IdentityGetPublicKeyRequest, origin: Origin, ctx: RequestContext
) -> str:
    with ctx.transaction() as manager:
        session = manager.sessions.effective_session(origin, ctx.site_origin)
        key_pair = derive_key_pair(
            manager.entropy,
            session.derivation_origin,
            session.identity_id,
            custom_salt=request.salt,
        )
        manager.increment_stats(origin)
    return key_pair.public_key().hex()


def handle_identity_logout_request(request: IdentityLogoutRequest, origin: Origin, ctx: RequestContext) -> bool:
    """Ask the user to log out of the calling origin.

    Returns ``True`` when no session exists or the user agreed, ``False`` if
    the user declined.
    """
    with ctx.transaction() as manager:
        if not manager.sessions.is_authenticated(origin):
            return True

        if not ctx.consent.confirm(logout_prompt(origin)):
            logger.info("Logout of %s declined", origin)
            return False

        manager.logout(origin)
        manager.increment_stats(origin)
    return True


def handle_identity_link_request(request: IdentityLinkRequest, origin: Origin, ctx: RequestContext) -> bool:
    """Ask the user to expose the caller's masks to another origin.

    Only the caller's own masks can be exposed; there is no way to request
    another origin's masks.
    """
    if origin == request.with_origin:
        raise InvalidInputError("Unable to link to itself", field="with_origin", value=request.with_origin)

    with ctx.transaction() as manager:
        if manager.link_exists(origin, request.with_origin):
            return True

        if not ctx.consent.confirm(link_prompt(origin, request.with_origin)):
            logger.info("Link %s -> %s declined", origin, request.with_origin)
            return False

        manager.link(origin, request.with_origin)
        manager.increment_stats(origin)
    return True


def handle_identity_unlink_request(request: IdentityUnlinkRequest, origin: Origin, ctx: RequestContext) -> bool:
    """Ask the user to withdraw the caller's masks from another origin.

    The other origin is logged out if it currently wears one of them.
    """
    with ctx.transaction() as manager:
        if not manager.link_exists(origin, request.with_origin):
            return True

        if not ctx.consent.confirm(unlink_prompt(origin, request.with_origin)):
            logger.info("Unlink %s -> %s declined", origin, request.with_origin)
            return False

        manager.unlink(origin, request.with_origin)
        manager.increment_stats(origin)
    return True


def handle_identity_get_links(request: IdentityGetLinksRequest, origin: Origin, ctx: RequestContext) -> list[str]:
    with ctx.transaction() as manager:
        manager.increment_stats(origin)
        return manager.links.links_to(origin)


def handle_identity_session_exists(
    request: IdentitySessionExistsRequest, origin: Origin, ctx: RequestContext
) -> bool:
    with ctx.transaction() as manager:
        manager.increment_stats(origin)
        return manager.sessions.is_authenticated(origin)
