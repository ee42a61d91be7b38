"""
Due-task selection for the delivery scheduler.
"""

from datetime import datetime
from typing import Optional, List, Protocol

from backend.delivery.models import ScheduledDelivery
from backend.utils.logging import scheduler_logger as logger


class PendingSource(Protocol):
    async def list_pending(
        self, now: datetime, limit: Optional[int] = None
    ) -> List[ScheduledDelivery]: ...


async def select_due_deliveries(
    store: PendingSource,
    now: datetime,
    limit: Optional[int] = None,
) -> List[ScheduledDelivery]:
    """
    Return pending deliveries whose scheduled_at <= now, oldest first.

    Read-only. An empty result is the normal case most ticks.
    """
    candidates = await store.list_pending(now, limit=limit)
    due = sorted(
        (d for d in candidates if d.is_due(now)),
        key=lambda d: d.scheduled_at,
    )

    if due:
        logger.info("Found due deliveries", count=len(due))
    return due
