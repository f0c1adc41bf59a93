"""Tests for the session manager: login preconditions, logout, login options."""

from __future__ import annotations

import pytest

from maskvault.core.exceptions import InvalidInputError, InvariantViolation, UnauthorizedError
from maskvault.identity.keys import derive_key_pair
from maskvault.identity.links import LinkGraph
from maskvault.identity.models import OriginData, SessionState
from maskvault.identity.pseudonyms import pseudonym_for_public_key
from maskvault.identity.registry import OriginRegistry
from maskvault.identity.sessions import SessionManager

A = "https://a.example"
B = "https://b.example"
C = "https://c.example"
SITE = "https://maskvault.app"


class _CountingEntropy:
    def __init__(self, inner) -> None:
        self.inner = inner
        self.labels: list[str] = []

    def get_entropy(self, label: str) -> bytes:
        self.labels.append(label)
        return self.inner.get_entropy(label)


@pytest.fixture()
def registry() -> OriginRegistry:
    return OriginRegistry({})


@pytest.fixture()
def links(registry) -> LinkGraph:
    return LinkGraph(registry)


@pytest.fixture()
def sessions(registry, links, entropy) -> SessionManager:
    return SessionManager(registry, links, entropy)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_own_mask(self, sessions, registry):
        registry.add_identity(A)
        registry.add_identity(A)

        session = sessions.login(A, 1, timestamp_ms=42)

        assert session.identity_id == 1
        assert session.derivation_origin == A
        assert session.timestamp_ms == 42
        assert sessions.is_authenticated(A)
        assert sessions.state(A) == SessionState.AUTHENTICATED

    def test_login_explicit_same_origin(self, sessions, registry):
        registry.add_identity(A)
        assert sessions.login(A, 0, derivation_origin=A).derivation_origin == A

    def test_login_without_link_unauthorized(self, sessions, registry):
        registry.add_identity(A)
        with pytest.raises(UnauthorizedError):
            sessions.login(B, 0, derivation_origin=A)
        assert not sessions.is_authenticated(B)

    def test_reverse_link_does_not_authorize(self, sessions, registry, links):
        registry.add_identity(A)
        links.link(B, A)  # B shared its masks with A, not the other way round
        with pytest.raises(UnauthorizedError):
            sessions.login(B, 0, derivation_origin=A)

    def test_login_with_linked_mask(self, sessions, registry, links):
        registry.add_identity(A)
        links.link(A, B)
        session = sessions.login(B, 0, derivation_origin=A)
        assert session.derivation_origin == A
        assert sessions.current(B) == session

    def test_linked_origin_without_masks_is_invariant_violation(self, sessions, links):
        links.link(A, B)
        with pytest.raises(InvariantViolation):
            sessions.login(B, 0, derivation_origin=A)

    def test_no_masks_is_invariant_violation(self, sessions):
        with pytest.raises(InvariantViolation):
            sessions.login(A, 0)

    def test_index_out_of_range(self, sessions, registry):
        registry.add_identity(A)
        with pytest.raises(InvalidInputError):
            sessions.login(A, 1)

    def test_relogin_replaces_session(self, sessions, registry):
        registry.add_identity(A)
        registry.add_identity(A)
        sessions.login(A, 0)
        sessions.login(A, 1)
        assert sessions.current(A).identity_id == 1


# ---------------------------------------------------------------------------
# Logout and effective sessions
# ---------------------------------------------------------------------------


class TestLogout:
    def test_logout_clears_session(self, sessions, registry):
        registry.add_identity(A)
        sessions.login(A, 0)
        assert sessions.logout(A) is True
        assert not sessions.is_authenticated(A)
        assert sessions.state(A) == SessionState.ANONYMOUS

    def test_logout_when_anonymous(self, sessions):
        assert sessions.logout(A) is False


class TestEffectiveSession:
    def test_active_session_used(self, sessions, registry):
        registry.add_identity(A)
        registry.add_identity(A)
        sessions.login(A, 1)
        assert sessions.effective_session(A, SITE).identity_id == 1

    def test_anonymous_origin_unauthorized(self, sessions):
        with pytest.raises(UnauthorizedError, match="Log in first"):
            sessions.effective_session(A, SITE)

    def test_site_has_implicit_session(self, sessions):
        session = sessions.effective_session(SITE, SITE)
        assert session.identity_id == 0
        assert session.derivation_origin == SITE


# ---------------------------------------------------------------------------
# Login options and masks
# ---------------------------------------------------------------------------


class TestLoginOptions:
    def test_own_group_first_then_linked(self, sessions, registry, links, entropy):
        registry.add_identity(A)
        registry.add_identity(A)
        links.link(A, B)

        options = sessions.login_options(B)

        assert [origin for origin, _ in options] == [B, A]
        assert options[0][1] == []
        assert options[1][1] == [
            derive_key_pair(entropy, A, 0).public_key(),
            derive_key_pair(entropy, A, 1).public_key(),
        ]

    def test_linked_groups_in_link_order(self, sessions, registry, links):
        registry.add_identity(B)
        registry.add_identity(C)
        links.link(C, A)
        links.link(B, A)
        assert [origin for origin, _ in sessions.login_options(A)] == [A, C, B]

    def test_unknown_origin_has_single_empty_group(self, sessions):
        assert sessions.login_options(A) == [(A, [])]


class TestMasks:
    def test_masks_listing(self, sessions, registry, entropy):
        registry.add_identity(A)
        registry.add_identity(A)
        masks = sessions.masks(A)
        assert [m.identity_id for m in masks] == [0, 1]
        key = derive_key_pair(entropy, A, 0)
        assert masks[0].public_key == key.public_key()
        assert masks[0].principal == key.principal()
        assert masks[0].pseudonym == pseudonym_for_public_key(key.public_key())

    def test_edited_pseudonym_wins(self, sessions, registry):
        registry.set(A, OriginData(identities_total=1, pseudonyms={0: "Work"}))
        assert sessions.masks(A)[0].pseudonym == "Work"

    def test_single_mask_costs_one_derivation(self, registry, links, entropy):
        counting = _CountingEntropy(entropy)
        sessions = SessionManager(registry, links, counting)
        for _ in range(5):
            registry.add_identity(A)

        mask = sessions.mask(A, 3)

        assert len(counting.labels) == 1
        assert mask == sessions.masks(A)[3]

    def test_single_mask_out_of_range(self, sessions, registry):
        registry.add_identity(A)
        with pytest.raises(InvalidInputError):
            sessions.mask(A, 1)
