"""Tests for the load → mutate → persist cycle of the state manager."""

from __future__ import annotations

import threading

import pytest

from maskvault.core.exceptions import InvalidInputError, InvariantViolation, UnauthorizedError
from maskvault.core.state_manager import StateManager
from maskvault.identity.models import SiteSession

A = "https://a.example"
B = "https://b.example"


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TestTransaction:
    def test_clean_exit_persists_once(self, store, entropy):
        with StateManager.transaction(store, entropy) as manager:
            manager.add_identity(A)
            manager.add_identity(A)
            manager.increment_stats(A)

        assert store.saves == 1
        assert store.load().origin_data[A].identities_total == 2

    def test_read_only_cycle_does_not_persist(self, store, entropy):
        with StateManager.transaction(store, entropy) as manager:
            manager.get_origin_data(A)
            manager.link_exists(A, B)
        assert store.saves == 0

    def test_exception_discards_changes(self, store, entropy):
        with pytest.raises(RuntimeError):
            with StateManager.transaction(store, entropy) as manager:
                manager.add_identity(A)
                raise RuntimeError("boom")

        assert store.saves == 0
        assert A not in store.load().origin_data

    def test_failed_login_discards_earlier_mutations(self, store, entropy):
        with pytest.raises(UnauthorizedError):
            with StateManager.transaction(store, entropy) as manager:
                manager.add_identity(A)
                manager.login(B, 0, derivation_origin=A)
        assert store.load().origin_data == {}

    def test_each_cycle_sees_previous_writes(self, store, entropy):
        with StateManager.transaction(store, entropy) as manager:
            manager.add_identity(A)
        with StateManager.transaction(store, entropy) as manager:
            assert manager.add_identity(A) == 1
        assert store.load().origin_data[A].identities_total == 2

    def test_manager_closed_after_cycle(self, store, entropy):
        with StateManager.transaction(store, entropy) as manager:
            manager.add_identity(A)
        assert manager.closed
        with pytest.raises(InvariantViolation):
            manager.add_identity(A)
        with pytest.raises(InvariantViolation):
            manager.persist()

    def test_concurrent_cycles_do_not_lose_updates(self, store, entropy):
        def add_many():
            for _ in range(20):
                with StateManager.transaction(store, entropy) as manager:
                    manager.add_identity(A)

        threads = [threading.Thread(target=add_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.load().origin_data[A].identities_total == 80


class TestPersist:
    def test_persist_closes_manager(self, manager, store):
        manager.add_identity(A)
        manager.persist()
        assert store.saves == 1
        assert manager.closed
        with pytest.raises(InvariantViolation):
            manager.link(A, B)

    def test_fresh_manager_after_persist(self, manager, store, entropy):
        manager.add_identity(A)
        manager.persist()
        fresh = StateManager.make(store, entropy)
        assert fresh.get_origin_data(A).identities_total == 1


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    def test_add_identity_returns_index(self, manager):
        assert manager.add_identity(A) == 0
        assert manager.add_identity(A) == 1
        assert manager.add_identity(B) == 0

    def test_get_origin_data_unknown_is_default(self, manager):
        data = manager.get_origin_data(A)
        assert data.identities_total == 0
        assert manager.all_origin_data() == {}

    def test_link_login_unlink_cascade(self, manager):
        manager.add_identity(A)
        manager.link(A, B)
        manager.login(B, 0, derivation_origin=A)
        assert manager.sessions.is_authenticated(B)

        manager.unlink(A, B)

        assert not manager.sessions.is_authenticated(B)
        assert not manager.link_exists(A, B)

    def test_unlink_all_cascade(self, manager):
        manager.add_identity(A)
        manager.link(A, B)
        manager.login(B, 0, derivation_origin=A)
        assert manager.unlink_all(A) == [B]
        assert manager.get_origin_data(B).current_session is None

    def test_edit_pseudonym(self, manager):
        manager.add_identity(A)
        manager.edit_pseudonym(A, 0, "Shopping")
        assert manager.get_origin_data(A).pseudonyms == {0: "Shopping"}
        assert manager.sessions.masks(A)[0].pseudonym == "Shopping"

    def test_edit_pseudonym_unknown_mask(self, manager):
        with pytest.raises(InvalidInputError):
            manager.edit_pseudonym(A, 0, "Nope")

    def test_site_session(self, manager):
        assert manager.get_site_session() is None
        session = SiteSession(kind="origin", identity_id=1, origin=A)
        manager.set_site_session(session)
        assert manager.get_site_session() == session
        manager.set_site_session(None)
        assert manager.get_site_session() is None

    def test_stats(self, manager):
        manager.increment_stats(A)
        manager.increment_stats(A)
        manager.increment_stats(B)
        assert manager.get_stats().requests == {A: 2, B: 1}

        manager.reset_stats()

        assert manager.get_stats().requests == {}
        assert manager.get_stats().reset_at_ms > 0
