"""Request boundary: validation, origin guard and dispatch.

``handle_request`` is the single entry point hosts call with the calling
origin and a raw payload. The payload is parsed into a typed request
variant, protected variants are refused unless the caller is the
application site, and the variant is dispatched through a handler table.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from maskvault.core.exceptions import MaskVaultException, ProtectedMethodError
from maskvault.core.logging import request_logger, request_scope
from maskvault.identity.models import Origin, canonical_origin
from maskvault.protocols import identity, state
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
    RequestModel,
    StateGetAllOriginDataRequest,
    StateGetSiteSessionRequest,
    StateSetSiteSessionRequest,
    StatisticsGetRequest,
    StatisticsResetRequest,
    parse_request,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Origin, RequestContext], Any]

HANDLERS: dict[type[RequestModel], Handler] = {
    IdentityAddRequest: identity.handle_identity_add,
    IdentityLoginRequest: identity.handle_identity_login,
    IdentityGetLoginOptionsRequest: identity.handle_identity_get_login_options,
    IdentityEditPseudonymRequest: identity.handle_identity_edit_pseudonym,
    IdentityStopSessionRequest: identity.handle_identity_stop_session,
    IdentityUnlinkOneRequest: identity.handle_identity_unlink_one,
    IdentityUnlinkAllRequest: identity.handle_identity_unlink_all,
    IdentitySignRequest: identity.handle_identity_sign,
    IdentityGetPublicKeyRequest: identity.handle_identity_get_public_key,
    IdentityLogoutRequest: identity.handle_identity_logout_request,
    IdentityLinkRequest: identity.handle_identity_link_request,
    IdentityUnlinkRequest: identity.handle_identity_unlink_request,
    IdentityGetLinksRequest: identity.handle_identity_get_links,
    IdentitySessionExistsRequest: identity.handle_identity_session_exists,
    StateGetAllOriginDataRequest: state.handle_state_get_all_origin_data,
    StateGetSiteSessionRequest: state.handle_state_get_site_session,
    StateSetSiteSessionRequest: state.handle_state_set_site_session,
    StatisticsGetRequest: state.handle_statistics_get,
    StatisticsResetRequest: state.handle_statistics_reset,
}


def guard_protected(request: RequestModel, origin: Origin, ctx: RequestContext) -> None:
    """Refuse protected requests from anything but the application site.

    Raises:
        ProtectedMethodError: If a protected request comes from another origin.
    """
    if request.protected and origin != ctx.site_origin:
        raise ProtectedMethodError(request.method, origin)  # type: ignore[attr-defined]


def dispatch(request: RequestModel, origin: Origin, ctx: RequestContext) -> Any:
    guard_protected(request, origin, ctx)
    return HANDLERS[type(request)](request, origin, ctx)


def handle_request(origin: str, payload: Any, ctx: RequestContext) -> Any:
    """Validate and execute one request from ``origin``.

    Args:
        origin: The calling website's origin as reported by the host.
        payload: Raw request mapping with a ``method`` tag.
        ctx: Host collaborators.

    Returns:
        The handler's JSON-compatible result.

    Raises:
        InvalidInputError: If the origin or payload is malformed.
        ProtectedMethodError: If a protected request comes from a website.
        MaskVaultException: Whatever the handler raises.
    """
    caller = canonical_origin(origin)
    request = parse_request(payload)
    method = request.method  # type: ignore[attr-defined]

    with request_scope(method, caller):
        request_logger.log_request(request.model_dump())
        start = time.perf_counter()
        try:
            result = dispatch(request, caller, ctx)
        except MaskVaultException as e:
            request_logger.log_result(False, (time.perf_counter() - start) * 1000)
            logger.warning("Request rejected: %s", e.message)
            raise
        request_logger.log_result(True, (time.perf_counter() - start) * 1000)
        return result
