"""Collaborators available to request handlers."""

from __future__ import annotations

from dataclasses import dataclass, field

from maskvault.consent import ConsentUI, StaticConsent
from maskvault.core.config import CoreSettings, get_config
from maskvault.core.state_manager import StateManager
from maskvault.identity.keys import EntropySource
from maskvault.storage.backend import StateStore


@dataclass
class RequestContext:
    """Host collaborators shared by every request.

    Attributes:
        store: Encrypted state store.
        entropy: The user's entropy source.
        consent: Confirmation dialogs; declines everything by default.
        settings: Core settings (application site origin).
    """

    store: StateStore
    entropy: EntropySource
    consent: ConsentUI = field(default_factory=lambda: StaticConsent(answer=False))
    settings: CoreSettings = field(default_factory=get_config)

    @property
    def site_origin(self) -> str:
        return self.settings.site_origin

    def transaction(self):
        """Start the load → mutate → persist cycle of one request."""
        return StateManager.transaction(self.store, self.entropy)
