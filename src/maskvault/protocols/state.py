"""State and statistics handlers for the application site."""

from __future__ import annotations

from typing import Any

from maskvault.identity.models import Origin
from maskvault.protocols.context import RequestContext
from maskvault.protocols.requests import (
    StateGetAllOriginDataRequest,
    StateGetSiteSessionRequest,
    StateSetSiteSessionRequest,
    StatisticsGetRequest,
    StatisticsResetRequest,
)


def handle_state_get_all_origin_data(
    request: StateGetAllOriginDataRequest, origin: Origin, ctx: RequestContext
) -> dict[str, Any]:
    """Every known origin with its links, session and masks."""
    with ctx.transaction() as manager:
        result = {}
        for known_origin, data in manager.all_origin_data().items():
            entry = data.to_dict()
            entry["masks"] = [mask.to_dict() for mask in manager.sessions.masks(known_origin)]
            result[known_origin] = entry
    return result


def handle_state_get_site_session(
    request: StateGetSiteSessionRequest, origin: Origin, ctx: RequestContext
) -> dict[str, Any] | None:
    with ctx.transaction() as manager:
        session = manager.get_site_session()
    return session.to_dict() if session else None


def handle_state_set_site_session(
    request: StateSetSiteSessionRequest, origin: Origin, ctx: RequestContext
) -> bool:
    session = request.session.to_site_session() if request.session else None
    with ctx.transaction() as manager:
        manager.set_site_session(session)
    return True


def handle_statistics_get(request: StatisticsGetRequest, origin: Origin, ctx: RequestContext) -> dict[str, Any]:
    with ctx.transaction() as manager:
        return manager.get_stats().to_dict()


def handle_statistics_reset(request: StatisticsResetRequest, origin: Origin, ctx: RequestContext) -> bool:
    with ctx.transaction() as manager:
        manager.reset_stats()
    return True
