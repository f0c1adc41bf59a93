# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""State manager — the per-request owner of the user's state.

Every request runs one cycle::

    with StateManager.transaction(store, entropy) as manager:
        manager.add_identity(origin)
        manager.increment_stats(origin)

The store lock is held for the whole cycle, the state is loaded fresh when
the cycle starts and persisted once when it ends cleanly. If the block
raises, nothing is written. A manager is closed after its cycle and cannot
be reused by a later request.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager

from maskvault.core.exceptions import InvalidInputError, InvariantViolation
from maskvault.identity.keys import EntropySource
from maskvault.identity.links import LinkGraph
from maskvault.identity.models import Origin, OriginData, Session, SiteSession, State, Statistics, now_ms
from maskvault.identity.registry import OriginRegistry
from maskvault.identity.sessions import SessionManager
from maskvault.storage.backend import StateStore

logger = logging.getLogger(__name__)


class StateManager:
    """Orchestrates registry, link graph and sessions over one loaded state."""

    def __init__(self, state: State, store: StateStore, entropy: EntropySource) -> None:
        self._state = state
        self._store = store
        self._entropy = entropy
        self._dirty = False
        self._closed = False

        self.registry = OriginRegistry(state.origin_data)
        self.links = LinkGraph(self.registry)
        self.sessions = SessionManager(self.registry, self.links, entropy)

    # -- Construction --------------------------------------------------------

    @classmethod
    def make(cls, store: StateStore, entropy: EntropySource) -> StateManager:
        """Load the latest persisted state, then construct a manager over it."""
        return cls(store.load(), store, entropy)

    @classmethod
    @contextmanager
    def transaction(cls, store: StateStore, entropy: EntropySource) -> Generator[StateManager, None, None]:
        """Run one serialized load → mutate → persist cycle."""
        with store.lock:
            manager = cls.make(store, entropy)
            try:
                yield manager
                if manager._dirty and not manager._closed:
                    manager.persist()
            finally:
                manager._closed = True

    # -- Lifecycle -----------------------------------------------------------

    @property
    def entropy(self) -> EntropySource:
        return self._entropy

    @property
    def closed(self) -> bool:
        return self._closed

    def _touch(self) -> None:
        if self._closed:
            raise InvariantViolation("State manager was already persisted; load a fresh one")
        self._dirty = True

    def persist(self) -> None:
        """Write the whole state through the store and close this manager."""
        if self._closed:
            raise InvariantViolation("State manager was already persisted; load a fresh one")
        self._store.save(self._state)
        self._closed = True
        self._dirty = False
        logger.debug("State persisted (%d origins)", len(self._state.origin_data))

    # -- Origin data ---------------------------------------------------------

    def get_origin_data(self, origin: Origin) -> OriginData:
        """Stored entry, or a fresh default that is not saved until set."""
        return self.registry.get(origin)

    def set_origin_data(self, origin: Origin, data: OriginData) -> None:
        self._touch()
        self.registry.set(origin, data)

    def all_origin_data(self) -> dict[Origin, OriginData]:
        return dict(self.registry.items())

    def add_identity(self, origin: Origin) -> int:
        """Create a new mask on ``origin``; returns its identity id."""
        self._touch()
        identity_id = self.registry.add_identity(origin)
        logger.info("Added mask %d on %s", identity_id, origin)
        return identity_id

    def increment_stats(self, origin: Origin) -> None:
        self._touch()
        self._state.statistics.increment(origin)

    # -- Links ---------------------------------------------------------------

    def link_exists(self, origin: Origin, other_origin: Origin) -> bool:
        return self.links.exists(origin, other_origin)

    def link(self, origin: Origin, other_origin: Origin) -> bool:
        self._touch()
        return self.links.link(origin, other_origin)

    def unlink(self, origin: Origin, other_origin: Origin) -> bool:
        self._touch()
        return self.links.unlink(origin, other_origin)

    def unlink_all(self, origin: Origin) -> list[Origin]:
        self._touch()
        return self.links.unlink_all(origin)

    # -- Sessions ------------------------------------------------------------

    def login(self, origin: Origin, identity_id: int, derivation_origin: Origin | None = None) -> Session:
        self._touch()
        return self.sessions.login(origin, identity_id, derivation_origin)

    def logout(self, origin: Origin) -> bool:
        self._touch()
        return self.sessions.logout(origin)

    def edit_pseudonym(self, origin: Origin, identity_id: int, pseudonym: str) -> None:
        data = self.registry.get(origin)
        if not 0 <= identity_id < data.identities_total:
            raise InvalidInputError("No such mask", field="identity_id", value=identity_id)
        self._touch()
        data.pseudonyms[identity_id] = pseudonym
        self.registry.set(origin, data)

    # -- Site session --------------------------------------------------------

    def get_site_session(self) -> SiteSession | None:
        return self._state.site_session

    def set_site_session(self, session: SiteSession | None) -> None:
        self._touch()
        self._state.site_session = session

    # -- Statistics ----------------------------------------------------------

    def get_stats(self) -> Statistics:
        return self._state.statistics

    def reset_stats(self) -> None:
        self._touch()
        self._state.statistics = Statistics(reset_at_ms=now_ms())
