"""User consent for link, unlink and logout requests.

Hosts supply a :class:`ConsentUI`. A declined prompt is a normal outcome:
the request is abandoned without touching state and the caller sees
``False``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from maskvault.identity.models import Origin, origin_to_hostname


@dataclass(frozen=True)
class Prompt:
    """Confirmation dialog content."""

    heading: str
    lines: tuple[str, ...] = ()
    warning: str | None = None

    def render(self) -> str:
        parts = [f"== {self.heading} ==", *self.lines]
        if self.warning:
            parts.append(f"!! {self.warning}")
        parts.append("Proceed?")
        return "\n".join(parts)


class ConsentUI(Protocol):
    def confirm(self, prompt: Prompt) -> bool: ...


@dataclass
class StaticConsent:
    """Answers every prompt the same way and remembers what was asked."""

    answer: bool = True
    prompts: list[Prompt] = field(default_factory=list)

    def confirm(self, prompt: Prompt) -> bool:
        self.prompts.append(prompt)
        return self.answer


class TerminalConsent:
    """Asks on a terminal; anything but an explicit yes declines."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stderr

    def confirm(self, prompt: Prompt) -> bool:
        self._stdout.write(prompt.render() + " [y/N] ")
        self._stdout.flush()
        answer = self._stdin.readline()
        return answer.strip().lower() in ("y", "yes")


# ---------------------------------------------------------------------------
# Prompt builders
# ---------------------------------------------------------------------------


def link_prompt(origin: Origin, with_origin: Origin) -> Prompt:
    host = origin_to_hostname(origin)
    other = origin_to_hostname(with_origin)
    return Prompt(
        heading="Mask Link Request",
        lines=(
            f"{host} wants you to reveal your masks to {other}.",
            f"You will be able to log in to {other} using masks you use on {host}.",
            f"Only proceed if {host} explicitly proposed this action to you.",
        ),
        warning=f"{other} will be able to act on {host} on your behalf without notice!",
    )


def unlink_prompt(origin: Origin, with_origin: Origin) -> Prompt:
    host = origin_to_hostname(origin)
    other = origin_to_hostname(with_origin)
    return Prompt(
        heading="Mask Unlink Request",
        lines=(
            f"{host} wants you to unlink your masks from {other}.",
            f"You will no longer be able to log in to {other} using masks you use on {host}.",
            f"You will be logged out from {other} if you are logged in with one of the linked masks.",
        ),
    )


def logout_prompt(origin: Origin) -> Prompt:
    host = origin_to_hostname(origin)
    return Prompt(
        heading="Log out request",
        lines=(f"{host} wants you to log out.",),
        warning=f"You will become anonymous, but {host} may still track your actions!",
    )
