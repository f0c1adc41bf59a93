"""Persistent data model for masks, links and sessions.

One :class:`State` object holds everything a user has: per-origin data
(mask count, link sets, current session), the application site session and
usage statistics. The whole object is encoded on every save.

Origins are the sharding key. They are canonicalised once, at the boundary,
and treated as opaque strings everywhere else.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlsplit

from maskvault.core.exceptions import InvalidInputError

Origin = str

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}

# ---------------------------------------------------------------------------
# Origins
# ---------------------------------------------------------------------------


def canonical_origin(value: str) -> Origin:
    """Normalise a website origin to ``scheme://host[:port]``.

    Raises:
        InvalidInputError: If the value has no scheme or host, or carries a
            path, query, fragment or credentials.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("Origin must be a non-empty string", field="origin", value=value)

    parts = urlsplit(value.strip())
    if not parts.scheme or not parts.hostname:
        raise InvalidInputError(f"Not a valid origin: {value!r}", field="origin", value=value)
    if parts.path not in ("", "/") or parts.query or parts.fragment:
        raise InvalidInputError(f"Origin must not carry a path: {value!r}", field="origin", value=value)
    if parts.username is not None or parts.password is not None:
        raise InvalidInputError(f"Origin must not carry credentials: {value!r}", field="origin", value=value)

    try:
        port = parts.port
    except ValueError as e:
        raise InvalidInputError(f"Bad port in origin: {value!r}", field="origin", value=value) from e

    scheme = parts.scheme.lower()
    if port == DEFAULT_PORTS.get(scheme):
        port = None

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{port}" if port is not None else host
    return f"{scheme}://{netloc}"


def origin_to_hostname(origin: Origin) -> str:
    """Return the host part of an origin for display."""
    return urlsplit(origin).hostname or origin


def now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class SessionState(enum.StrEnum):
    """Authentication state of one origin."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """The mask currently worn on an origin.

    ``derivation_origin`` is the origin whose masks are borrowed: the origin
    itself, or one that linked its masks to it.
    """

    identity_id: int
    derivation_origin: Origin
    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity_id": self.identity_id,
            "derivation_origin": self.derivation_origin,
            "timestamp_ms": self.timestamp_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            identity_id=int(data["identity_id"]),
            derivation_origin=data["derivation_origin"],
            timestamp_ms=int(data["timestamp_ms"]),
        )


@dataclass(frozen=True)
class SiteSession:
    """Session of the application site itself.

    The site logs in either as a mask of some origin (``kind="origin"``) or
    as a mask bound to a canister principal (``kind="canister"``).
    """

    kind: Literal["origin", "canister"]
    identity_id: int
    origin: Origin | None = None
    canister_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind == "origin" and self.origin is None:
            raise InvalidInputError("Origin site session requires an origin", field="origin")
        if self.kind == "canister" and self.canister_id is None:
            raise InvalidInputError("Canister site session requires a canister id", field="canister_id")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind, "identity_id": self.identity_id}
        if self.kind == "origin":
            data["origin"] = self.origin
        else:
            data["canister_id"] = self.canister_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SiteSession:
        return cls(
            kind=data["type"],
            identity_id=int(data["identity_id"]),
            origin=data.get("origin"),
            canister_id=data.get("canister_id"),
        )


# ---------------------------------------------------------------------------
# OriginData
# ---------------------------------------------------------------------------


@dataclass
class OriginData:
    """Everything known about one origin.

    Attributes:
        identities_total: Number of masks created on this origin. Only grows.
        links_from: Origins whose masks this origin may present (incoming trust).
        links_to: Origins this origin exposed its own masks to (outgoing trust).
        current_session: The worn mask, or ``None`` when anonymous.
        pseudonyms: User-chosen mask names by identity id; masks without an
            entry use their generated pseudonym.
    """

    identities_total: int = 0
    links_from: list[Origin] = field(default_factory=list)
    links_to: list[Origin] = field(default_factory=list)
    current_session: Session | None = None
    pseudonyms: dict[int, str] = field(default_factory=dict)

    @property
    def session_state(self) -> SessionState:
        if self.current_session is None:
            return SessionState.ANONYMOUS
        return SessionState.AUTHENTICATED

    def to_dict(self) -> dict[str, Any]:
        return {
            "identities_total": self.identities_total,
            "links_from": list(self.links_from),
            "links_to": list(self.links_to),
            "current_session": self.current_session.to_dict() if self.current_session else None,
            "pseudonyms": {str(k): v for k, v in self.pseudonyms.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OriginData:
        session = data.get("current_session")
        return cls(
            identities_total=int(data.get("identities_total", 0)),
            links_from=list(data.get("links_from", [])),
            links_to=list(data.get("links_to", [])),
            current_session=Session.from_dict(session) if session else None,
            pseudonyms={int(k): v for k, v in data.get("pseudonyms", {}).items()},
        )


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@dataclass
class Statistics:
    """Per-origin request counters. Observability only."""

    requests: dict[Origin, int] = field(default_factory=dict)
    reset_at_ms: int = field(default_factory=now_ms)

    def increment(self, origin: Origin) -> None:
        self.requests[origin] = self.requests.get(origin, 0) + 1

    def to_dict(self) -> dict[str, Any]:
        return {"requests": dict(self.requests), "reset_at_ms": self.reset_at_ms}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Statistics:
        return cls(
            requests={k: int(v) for k, v in data.get("requests", {}).items()},
            reset_at_ms=int(data.get("reset_at_ms", 0)),
        )


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass
class State:
    """The single persisted object backing every request."""

    site_session: SiteSession | None = None
    origin_data: dict[Origin, OriginData] = field(default_factory=dict)
    statistics: Statistics = field(default_factory=Statistics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "site_session": self.site_session.to_dict() if self.site_session else None,
            "origin_data": {origin: data.to_dict() for origin, data in self.origin_data.items()},
            "statistics": self.statistics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> State:
        site_session = data.get("site_session")
        statistics = data.get("statistics")
        return cls(
            site_session=SiteSession.from_dict(site_session) if site_session else None,
            origin_data={
                origin: OriginData.from_dict(entry) for origin, entry in data.get("origin_data", {}).items()
            },
            statistics=Statistics.from_dict(statistics) if statistics else Statistics(),
        )
