"""Masks, links and sessions — one set of identities per website origin.

Key concepts:
- **Mask**: an origin-scoped secp256k1 key pair, re-derived on demand from the
  user's entropy source and addressed by its identity index.
- **Link**: a directed grant letting one origin offer another origin's masks.
- **Session**: the mask currently worn on an origin.

Security properties:
- Keys are never stored; losing the seed invalidates every mask.
- Masks are unlinkable across origins unless the owning origin links them.
- Only the owning origin can expose its masks.
"""

from maskvault.identity.keys import DerivedKeyPair, EntropySource, SeedEntropySource, derive_key_pair
from maskvault.identity.links import LinkGraph
from maskvault.identity.models import (
    OriginData,
    Session,
    SessionState,
    SiteSession,
    State,
    Statistics,
    canonical_origin,
)
from maskvault.identity.registry import OriginRegistry
from maskvault.identity.sessions import Mask, SessionManager

__all__ = [
    "DerivedKeyPair",
    "EntropySource",
    "LinkGraph",
    "Mask",
    "OriginData",
    "OriginRegistry",
    "SeedEntropySource",
    "Session",
    "SessionManager",
    "SessionState",
    "SiteSession",
    "State",
    "Statistics",
    "canonical_origin",
    "derive_key_pair",
]
