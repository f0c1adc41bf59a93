# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""maskvault - origin-scoped identities with consent-gated sharing.

A user keeps many independent signing masks, one set per website origin,
all derived on demand from a single secret seed. Masks stay unlinkable
across origins unless the owning origin explicitly links them to another
origin and the user agrees.

Architecture:
  Entropy source (host)
    → Key derivation (identity.keys)
    → Origin registry, link graph, sessions (identity.*)
    → State manager: load → mutate → persist once per request (core.state_manager)
    → Typed requests and dispatch (protocols.*)

CLI entry point: ``maskvault``
"""

__version__ = "0.1.0"
