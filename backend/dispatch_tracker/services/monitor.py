"""One poll cycle: fetch, normalize, diff, persist, render, publish."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_tracker.config import Settings, get_settings
from dispatch_tracker.schemas.incident import FeedIncident
from dispatch_tracker.services.clock import local_zone, utcnow
from dispatch_tracker.services.differ import Snapshot, SnapshotDiff, diff_snapshots
from dispatch_tracker.services.feed_client import DispatchFeedClient
from dispatch_tracker.services.formatting import format_changes_message, format_status_message
from dispatch_tracker.services.normalizer import normalize_feed
from dispatch_tracker.services.publisher import LogPublisher, Publisher
from dispatch_tracker.services.snapshots import SnapshotRepository
from dispatch_tracker.services.store import IncidentStore

logger = logging.getLogger(__name__)


@dataclass
class PollResult:
    """Outcome of a single poll cycle."""

    total: int
    first_run: bool
    unchanged: bool
    new: list[FeedIncident] = field(default_factory=list)
    cleared: list[FeedIncident] = field(default_factory=list)
    recorded: int = 0
    failed: int = 0
    message: str | None = None
    published: bool = False


class DispatchMonitor:
    """
    Runs poll cycles against the active dispatch feed.

    The previous snapshot is an explicit input and the next snapshot an
    explicit output of run_cycle; it is also persisted so a restart resumes
    from the last successful poll. A failed fetch or parse raises before any
    store or snapshot write.
    """

    def __init__(
        self,
        db: AsyncSession,
        feed_client: DispatchFeedClient | None = None,
        publisher: Publisher | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.feed_client = feed_client or DispatchFeedClient()
        self.publisher = publisher or LogPublisher("status")
        self.store = IncidentStore(db, local_zone(self.settings.local_timezone))
        self.snapshots = SnapshotRepository(db)

    async def run_cycle(
        self,
        previous: Snapshot | None = None,
        now: datetime | None = None,
    ) -> tuple[PollResult, Snapshot]:
        """
        Execute one cycle.

        Returns:
            Tuple of (poll result, snapshot to pass as `previous` next time)

        Raises:
            FeedClientError, FeedParseError: fetch failed; nothing was written
        """
        payload = await self.feed_client.fetch_active()
        incidents = normalize_feed(payload)

        now = now or utcnow()
        if previous is None:
            previous = await self.snapshots.load()

        first_run = previous.last_update is None
        diff = diff_snapshots(previous, incidents, now=now)
        unchanged = not first_run and diff.fingerprint == previous.fingerprint

        recorded, failed = await self.store.record_snapshot(incidents, now=now)
        await self.store.mark_cleared((incident.incident_id for incident in diff.cleared), now=now)
        await self.store.clear_superseded(incidents, now=now)
        await self.snapshots.save(diff.snapshot)

        announce_new = not first_run or self.settings.first_poll_policy == "announce"
        result = PollResult(
            total=len(incidents),
            first_run=first_run,
            unchanged=unchanged,
            new=diff.new if announce_new else [],
            cleared=diff.cleared,
            recorded=recorded,
            failed=failed,
        )
        logger.info(
            f"Poll complete: {result.total} active, {len(result.new)} new, "
            f"{len(result.cleared)} cleared{' (first run)' if first_run else ''}"
        )

        if unchanged:
            logger.info("No changes since last poll, skipping publish")
            return result, diff.snapshot

        result.message = self.render(diff, incidents, result.new, first_run, now)
        if result.message is not None:
            try:
                await self.publisher.publish(result.message)
                result.published = True
            except Exception as e:
                # The poll is already persisted; publishing is best effort.
                logger.error(f"Publishing dispatch update failed: {e}", exc_info=True)

        return result, diff.snapshot

    def render(
        self,
        diff: SnapshotDiff,
        incidents: list[FeedIncident],
        new: list[FeedIncident],
        first_run: bool,
        now: datetime,
    ) -> str | None:
        """Build the message for this cycle; None when there is nothing to say."""
        baseline = first_run and self.settings.first_poll_policy == "baseline"
        if self.settings.output_mode == "status" or baseline:
            return format_status_message(incidents, now, self.settings)

        if not new and not diff.cleared:
            return None
        return format_changes_message(new, diff.cleared, len(incidents), now, self.settings)
