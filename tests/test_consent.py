"""Tests for consent prompts."""

from __future__ import annotations

import io

from maskvault.consent import StaticConsent, TerminalConsent, link_prompt, logout_prompt, unlink_prompt

A = "https://a.example"
B = "https://b.example:8443"


def test_link_prompt_names_both_hosts():
    prompt = link_prompt(A, B)
    text = prompt.render()
    assert "a.example wants you to reveal your masks to b.example." in text
    assert prompt.warning.startswith("b.example will be able to act on a.example")
    assert text.endswith("Proceed?")


def test_unlink_and_logout_prompts():
    assert unlink_prompt(A, B).warning is None
    assert "log out" in logout_prompt(A).lines[0]


def test_static_consent_records_prompts():
    consent = StaticConsent(answer=False)
    assert consent.confirm(logout_prompt(A)) is False
    assert len(consent.prompts) == 1


def test_terminal_consent():
    out = io.StringIO()
    assert TerminalConsent(io.StringIO("yes\n"), out).confirm(logout_prompt(A)) is True
    assert "[y/N]" in out.getvalue()
    assert TerminalConsent(io.StringIO("\n"), io.StringIO()).confirm(logout_prompt(A)) is False
