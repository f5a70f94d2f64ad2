"""
Snapshot differencing between consecutive feed polls.

The differ is a pure set-diff over incident ids. It has no notion of
"first run"; callers decide whether the first poll is announced.
"""

import hashlib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from dispatch_tracker.schemas.incident import FeedIncident


def fingerprint(incidents: Iterable[FeedIncident]) -> str:
    """Digest of the sorted id set; equal for polls reporting the same ids."""
    ids = sorted({incident.incident_id for incident in incidents})
    return hashlib.sha256("\n".join(ids).encode()).hexdigest()


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of one poll: incident_id -> incident."""

    incidents: Mapping[str, FeedIncident] = field(
        default_factory=lambda: MappingProxyType({})
    )
    fingerprint: str | None = None
    last_update: datetime | None = None

    @classmethod
    def from_incidents(
        cls, incidents: Sequence[FeedIncident], last_update: datetime | None = None
    ) -> "Snapshot":
        by_id = {incident.incident_id: incident for incident in incidents}
        return cls(
            incidents=MappingProxyType(by_id),
            fingerprint=fingerprint(incidents),
            last_update=last_update,
        )

    @property
    def is_empty(self) -> bool:
        return self.last_update is None and not self.incidents


@dataclass(frozen=True)
class SnapshotDiff:
    """Result of comparing a previous snapshot with the current poll."""

    new: list[FeedIncident]
    cleared: list[FeedIncident]
    snapshot: Snapshot

    @property
    def fingerprint(self) -> str:
        return self.snapshot.fingerprint or ""

    @property
    def has_changes(self) -> bool:
        return bool(self.new or self.cleared)


def diff_snapshots(
    previous: Snapshot,
    current: Sequence[FeedIncident],
    now: datetime | None = None,
) -> SnapshotDiff:
    """
    Compare the previous snapshot against the current poll by id.

    Returns new incidents (in current order), cleared incidents (the full
    previous records), and the snapshot that becomes the next "previous".
    """
    current_ids = {incident.incident_id for incident in current}

    new = [incident for incident in current if incident.incident_id not in previous.incidents]
    cleared = [
        incident
        for incident_id, incident in previous.incidents.items()
        if incident_id not in current_ids
    ]

    return SnapshotDiff(
        new=new,
        cleared=cleared,
        snapshot=Snapshot.from_incidents(current, last_update=now),
    )
