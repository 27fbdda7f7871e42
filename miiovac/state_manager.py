"""Snapshot cache for device properties.

Fetches may overlap (a periodic poll and a command-triggered refresh, for
example). Every fetch takes a sequence number when it is issued and each
cached property remembers the sequence of the fetch that last wrote it, so a
fetch that completes late can never overwrite a value written by a fetch
issued after it.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .models import ChangeEvent

logger = logging.getLogger(__name__)


class PropertyStateManager:
    """Owns the property snapshot of a single device model."""

    def __init__(self):
        self._values: dict[str, Any] = {}
        self._written_by: dict[str, int] = {}
        self._issued = 0

    def next_sequence(self) -> int:
        """Reserve the sequence number for a fetch that is about to be issued."""
        self._issued += 1
        return self._issued

    @property
    def last_issued(self) -> int:
        return self._issued

    def apply(self, sequence: int, values: Mapping[str, Any]) -> list[ChangeEvent]:
        """Apply the result of fetch ``sequence`` and return the changes.

        Properties already written by a newer fetch are left untouched. The
        cache is swapped in one assignment, so readers see either the old
        snapshot or the new one.

        Args:
            sequence: Number handed out by ``next_sequence`` for this fetch
            values: Public-name keyed values produced by the fetch

        Returns:
            Change events in the iteration order of ``values``
        """
        updated = dict(self._values)
        written_by = dict(self._written_by)
        changes: list[ChangeEvent] = []
        stale: list[str] = []

        for name, value in values.items():
            if written_by.get(name, 0) > sequence:
                stale.append(name)
                continue
            old_value = updated.get(name)
            written_by[name] = sequence
            updated[name] = value
            if old_value != value:
                changes.append(ChangeEvent(name=name, new_value=value, old_value=old_value))

        if stale:
            logger.debug(f"Discarded stale values from fetch #{sequence}: {stale}")

        self._values = updated
        self._written_by = written_by
        return changes

    def get(self, name: str, default: Any = None) -> Any:
        """Return the cached value of ``name``."""
        return self._values.get(name, default)

    def has_property(self, name: str) -> bool:
        """Check whether ``name`` has been fetched at least once."""
        return name in self._values

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of the current snapshot."""
        return dict(self._values)
