"""Tests for request parsing."""

from __future__ import annotations

import pytest

from maskvault.core.exceptions import InvalidInputError
from maskvault.protocols.requests import (
    IdentityAddRequest,
    IdentityEditPseudonymRequest,
    IdentityLinkRequest,
    IdentityLoginRequest,
    IdentitySignRequest,
    StateSetSiteSessionRequest,
    parse_request,
)


class TestParseRequest:
    def test_dispatches_on_method(self):
        request = parse_request({"method": "identity_add", "to_origin": "https://A.example/"})
        assert isinstance(request, IdentityAddRequest)
        assert request.to_origin == "https://a.example"

    def test_login_optional_derivation(self):
        request = parse_request({"method": "identity_login", "to_origin": "https://b.example", "with_identity_id": 1})
        assert isinstance(request, IdentityLoginRequest)
        assert request.with_derivation_origin is None

    def test_hex_fields_decoded(self):
        request = parse_request({"method": "identity_sign", "challenge": "0xdeadbeef", "salt": "01"})
        assert isinstance(request, IdentitySignRequest)
        assert request.challenge == b"\xde\xad\xbe\xef"
        assert request.salt == b"\x01"

    def test_bad_hex(self):
        with pytest.raises(InvalidInputError, match="Invalid request"):
            parse_request({"method": "identity_sign", "challenge": "xyz"})

    def test_unknown_method(self):
        with pytest.raises(InvalidInputError):
            parse_request({"method": "identity_steal"})

    def test_missing_method(self):
        with pytest.raises(InvalidInputError):
            parse_request({"to_origin": "https://a.example"})

    def test_extra_fields_rejected(self):
        with pytest.raises(InvalidInputError):
            parse_request({"method": "identity_get_links", "origin": "https://a.example"})

    def test_negative_identity_id(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_request({"method": "identity_login", "to_origin": "https://a.example", "with_identity_id": -1})
        assert exc_info.value.field == "identity_login.with_identity_id"

    def test_invalid_origin(self):
        with pytest.raises(InvalidInputError):
            parse_request({"method": "identity_link_request", "with_origin": "https://b.example/path"})

    def test_pseudonym_length(self):
        with pytest.raises(InvalidInputError):
            parse_request(
                {"method": "identity_edit_pseudonym", "origin": "https://a.example", "identity_id": 0, "new_pseudonym": ""}
            )
        request = parse_request(
            {"method": "identity_edit_pseudonym", "origin": "https://a.example", "identity_id": 0, "new_pseudonym": "Me"}
        )
        assert isinstance(request, IdentityEditPseudonymRequest)

    def test_site_session_body(self):
        request = parse_request(
            {"method": "state_set_site_session", "session": {"type": "canister", "canister_id": "abc", "identity_id": 0}}
        )
        assert isinstance(request, StateSetSiteSessionRequest)
        site_session = request.session.to_site_session()
        assert site_session.kind == "canister"
        assert site_session.canister_id == "abc"

    def test_site_session_clear(self):
        request = parse_request({"method": "state_set_site_session", "session": None})
        assert request.session is None


class TestProtectedFlag:
    def test_management_requests_are_protected(self):
        assert IdentityAddRequest.protected
        assert IdentityLoginRequest.protected
        assert StateSetSiteSessionRequest.protected

    def test_website_requests_are_public(self):
        assert not IdentitySignRequest.protected
        assert not IdentityLinkRequest.protected
