"""Load and save the last poll snapshot."""

import logging
from types import MappingProxyType

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.database import dialect_insert
from dispatch_tracker.models import SnapshotState
from dispatch_tracker.schemas.incident import FeedIncident
from dispatch_tracker.services.differ import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "active_dispatch"


class SnapshotRepository:
    """Persists the Snapshot value threaded between poll cycles."""

    def __init__(self, db: AsyncSession, source: str = DEFAULT_SOURCE):
        self.db = db
        self.source = source

    async def load(self) -> Snapshot:
        """Return the stored snapshot, or an empty one on first run."""
        result = await self.db.execute(
            select(SnapshotState).where(SnapshotState.source == self.source)
        )
        state = result.scalar_one_or_none()
        if state is None:
            return Snapshot()

        incidents: dict[str, FeedIncident] = {}
        for incident_id, data in (state.incidents or {}).items():
            try:
                incidents[incident_id] = FeedIncident.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Dropping unreadable snapshot entry {incident_id}: {e}")

        return Snapshot(
            incidents=MappingProxyType(incidents),
            fingerprint=state.fingerprint,
            last_update=state.last_update_at,
        )

    async def save(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot wholesale."""
        if snapshot.last_update is None:
            raise ValueError("Cannot save a snapshot without last_update")

        incidents = {
            incident_id: incident.model_dump(mode="json")
            for incident_id, incident in snapshot.incidents.items()
        }
        values = {
            "source": self.source,
            "incidents": incidents,
            "fingerprint": snapshot.fingerprint,
            "last_update_at": snapshot.last_update,
            "record_count": len(incidents),
            "updated_at": snapshot.last_update,
        }
        stmt = dialect_insert(self.db, SnapshotState).values(**values).on_conflict_do_update(
            index_elements=["source"],
            set_={k: v for k, v in values.items() if k != "source"},
        )
        await self.db.execute(stmt)
        await self.db.commit()
