"""Directed link graph between origins.

An edge ``A -> B`` means origin A exposed its masks to origin B, so B may
offer A's masks at login. The edge is stored twice, in ``A.links_to`` and in
``B.links_from``; every mutation here updates both sides together.

Only the grantor creates edges: ``link(origin, other)`` always has the mask
owner first. Nothing in this module lets the grantee pull an edge towards
itself.
"""

from __future__ import annotations

import logging

from maskvault.core.exceptions import InvalidInputError
from maskvault.identity.models import Origin
from maskvault.identity.registry import OriginRegistry

logger = logging.getLogger(__name__)


class LinkGraph:
    """Link operations over an :class:`OriginRegistry`."""

    def __init__(self, registry: OriginRegistry) -> None:
        self._registry = registry

    def exists(self, origin: Origin, other_origin: Origin) -> bool:
        """True iff ``origin`` has exposed its masks to ``other_origin``."""
        return other_origin in self._registry.get(origin).links_to

    def links_to(self, origin: Origin) -> list[Origin]:
        return list(self._registry.get(origin).links_to)

    def links_from(self, origin: Origin) -> list[Origin]:
        return list(self._registry.get(origin).links_from)

    def link(self, origin: Origin, other_origin: Origin) -> bool:
        """Expose the masks of ``origin`` to ``other_origin``.

        Returns:
            ``True`` if a new edge was added, ``False`` if it already existed.

        Raises:
            InvalidInputError: If both origins are the same.
        """
        if origin == other_origin:
            raise InvalidInputError("Unable to link to itself", field="with_origin", value=other_origin)
        if self.exists(origin, other_origin):
            return False

        grantor = self._registry.get(origin)
        grantee = self._registry.get(other_origin)
        grantor.links_to.append(other_origin)
        if origin not in grantee.links_from:
            grantee.links_from.append(origin)
        self._registry.set(origin, grantor)
        self._registry.set(other_origin, grantee)

        logger.info("Linked %s -> %s", origin, other_origin)
        return True

    def unlink(self, origin: Origin, other_origin: Origin) -> bool:
        """Remove the edge ``origin -> other_origin``.

        If ``other_origin`` is logged in with one of ``origin``'s masks, its
        session is cleared as well.

        Returns:
            ``True`` if an edge was removed, ``False`` if there was none.
        """
        grantor = self._registry.get(origin)
        grantee = self._registry.get(other_origin)
        if other_origin not in grantor.links_to and origin not in grantee.links_from:
            return False

        grantor.links_to = [o for o in grantor.links_to if o != other_origin]
        grantee.links_from = [o for o in grantee.links_from if o != origin]

        session = grantee.current_session
        if session is not None and session.derivation_origin == origin:
            grantee.current_session = None
            logger.info("Session on %s ended by unlink from %s", other_origin, origin)

        self._registry.set(origin, grantor)
        self._registry.set(other_origin, grantee)

        logger.info("Unlinked %s -> %s", origin, other_origin)
        return True

    def unlink_all(self, origin: Origin) -> list[Origin]:
        """Remove every outgoing edge of ``origin``; returns the former grantees."""
        removed = []
        for other_origin in self.links_to(origin):
            if self.unlink(origin, other_origin):
                removed.append(other_origin)
        return removed
