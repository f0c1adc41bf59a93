"""Origin data registry.

Entries are materialised lazily: reading an unknown origin returns a fresh
default that is only stored once something writes it back. Entries are never
deleted.
"""

from __future__ import annotations

from maskvault.identity.models import Origin, OriginData


class OriginRegistry:
    """Per-origin records of one loaded :class:`~maskvault.identity.models.State`."""

    def __init__(self, entries: dict[Origin, OriginData]) -> None:
        self._entries = entries

    def get(self, origin: Origin) -> OriginData:
        """Return the stored entry or an unsaved default."""
        data = self._entries.get(origin)
        if data is None:
            return OriginData()
        return data

    def set(self, origin: Origin, data: OriginData) -> None:
        self._entries[origin] = data

    def contains(self, origin: Origin) -> bool:
        return origin in self._entries

    def identities_total(self, origin: Origin) -> int:
        return self.get(origin).identities_total

    def add_identity(self, origin: Origin) -> int:
        """Create one more mask on ``origin`` and return its identity id."""
        data = self.get(origin)
        identity_id = data.identities_total
        data.identities_total += 1
        self.set(origin, data)
        return identity_id

    def items(self) -> list[tuple[Origin, OriginData]]:
        return list(self._entries.items())
