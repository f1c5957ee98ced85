"""
Snapshot Store

Holds the currently published directory snapshot. Publishing swaps a single
reference, so readers see either the old or the new snapshot, never a mix.
"""
import logging

from iptv_directory.models import Snapshot


logger = logging.getLogger(__name__)


class SnapshotStore:
    """Owns the live Snapshot; starts out with an empty one."""

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshot = initial if initial is not None else Snapshot.empty()

    def current(self) -> Snapshot:
        """Return the latest published snapshot."""
        return self._snapshot

    def publish(self, snapshot: Snapshot) -> None:
        """Replace the live snapshot. Must be fully built before this call."""
        self._snapshot = snapshot
        logger.debug(
            "Published snapshot: %s channels, %s programmes",
            len(snapshot.channels),
            snapshot.programme_count,
        )
