"""Session lifecycle per origin.

Each origin is either ``ANONYMOUS`` or ``AUTHENTICATED`` with exactly one
:class:`~maskvault.identity.models.Session`. Login borrows masks from the
origin itself or from an origin that linked to it; logout is unconditional.
Unlinking a derivation origin also ends the session (see
:meth:`maskvault.identity.links.LinkGraph.unlink`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from maskvault.core.exceptions import InvalidInputError, InvariantViolation, UnauthorizedError
from maskvault.identity.keys import EntropySource, derive_key_pair
from maskvault.identity.links import LinkGraph
from maskvault.identity.models import Origin, Session, SessionState, now_ms
from maskvault.identity.pseudonyms import pseudonym_for_public_key
from maskvault.identity.registry import OriginRegistry

logger = logging.getLogger(__name__)

LoginOptions = list[tuple[Origin, list[bytes]]]


@dataclass(frozen=True)
class Mask:
    """Public view of one mask."""

    identity_id: int
    public_key: bytes
    principal: str
    pseudonym: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity_id": self.identity_id,
            "public_key": self.public_key.hex(),
            "principal": self.principal,
            "pseudonym": self.pseudonym,
        }


class SessionManager:
    """Login, logout and lookup of the current session of an origin."""

    def __init__(self, registry: OriginRegistry, links: LinkGraph, entropy: EntropySource) -> None:
        self._registry = registry
        self._links = links
        self._entropy = entropy

    # -- Queries -------------------------------------------------------------

    def current(self, origin: Origin) -> Session | None:
        return self._registry.get(origin).current_session

    def state(self, origin: Origin) -> SessionState:
        return self._registry.get(origin).session_state

    def is_authenticated(self, origin: Origin) -> bool:
        return self.state(origin) == SessionState.AUTHENTICATED

    def effective_session(self, origin: Origin, site_origin: Origin) -> Session:
        """Session used for signing on ``origin``.

        The application site is always signed in with its own first mask,
        even without an explicit login.

        Raises:
            UnauthorizedError: If ``origin`` is anonymous and not the site.
        """
        session = self.current(origin)
        if session is not None:
            return session
        if origin == site_origin:
            return Session(identity_id=0, derivation_origin=origin, timestamp_ms=0)
        raise UnauthorizedError("Log in first", origin=origin)

    # -- Transitions ---------------------------------------------------------

    def login(
        self,
        origin: Origin,
        identity_id: int,
        derivation_origin: Origin | None = None,
        timestamp_ms: int | None = None,
    ) -> Session:
        """Wear mask ``identity_id`` of ``derivation_origin`` on ``origin``.

        Args:
            origin: Origin being logged in to.
            identity_id: Index of the mask on the derivation origin.
            derivation_origin: Owner of the mask; defaults to ``origin``.
            timestamp_ms: Login time, defaults to now.

        Returns:
            The new :class:`Session`, replacing any previous one.

        Raises:
            UnauthorizedError: If ``derivation_origin`` never linked to ``origin``.
            InvariantViolation: If the derivation origin has no masks at all.
            InvalidInputError: If ``identity_id`` is out of range.
        """
        derivation_origin = derivation_origin or origin

        if derivation_origin != origin and not self._links.exists(derivation_origin, origin):
            raise UnauthorizedError("Unable to login without a link", origin=origin)

        total = self._registry.identities_total(derivation_origin)
        if total == 0:
            raise InvariantViolation(
                "login - no masks on derivation origin",
                details={"origin": origin, "derivation_origin": derivation_origin},
            )
        if not 0 <= identity_id < total:
            raise InvalidInputError(
                f"Identity id out of range (0..{total - 1})",
                field="identity_id",
                value=identity_id,
            )

        session = Session(
            identity_id=identity_id,
            derivation_origin=derivation_origin,
            timestamp_ms=now_ms() if timestamp_ms is None else timestamp_ms,
        )
        data = self._registry.get(origin)
        data.current_session = session
        self._registry.set(origin, data)

        logger.info("Logged in to %s with mask %d of %s", origin, identity_id, derivation_origin)
        return session

    def logout(self, origin: Origin) -> bool:
        """End the session on ``origin``; returns whether one existed."""
        data = self._registry.get(origin)
        if data.current_session is None:
            return False
        data.current_session = None
        self._registry.set(origin, data)
        logger.info("Logged out of %s", origin)
        return True

    # -- Listings ------------------------------------------------------------

    def login_options(self, origin: Origin) -> LoginOptions:
        """Public keys of every mask usable on ``origin``.

        The origin's own masks come first, then those of each origin that
        linked to it, in link order. One derivation per listed mask.
        """
        groups: LoginOptions = [(origin, self._public_keys(origin))]
        for linked_origin in self._links.links_from(origin):
            groups.append((linked_origin, self._public_keys(linked_origin)))
        return groups

    def masks(self, origin: Origin) -> list[Mask]:
        total = self._registry.identities_total(origin)
        return [self.mask(origin, identity_id) for identity_id in range(total)]

    def mask(self, origin: Origin, identity_id: int) -> Mask:
        """Public view of one mask; a single derivation.

        Raises:
            InvalidInputError: If ``identity_id`` is out of range.
        """
        data = self._registry.get(origin)
        if not 0 <= identity_id < data.identities_total:
            raise InvalidInputError("No such mask", field="identity_id", value=identity_id)
        key_pair = derive_key_pair(self._entropy, origin, identity_id)
        public_key = key_pair.public_key()
        return Mask(
            identity_id=identity_id,
            public_key=public_key,
            principal=key_pair.principal(),
            pseudonym=data.pseudonyms.get(identity_id) or pseudonym_for_public_key(public_key),
        )

    def _public_keys(self, origin: Origin) -> list[bytes]:
        total = self._registry.identities_total(origin)
        return [derive_key_pair(self._entropy, origin, i).public_key() for i in range(total)]
