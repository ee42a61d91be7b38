"""
Delivery Store

Persistent access to scheduled video deliveries in Supabase.
Status changes are compare-and-transition updates keyed on id and the
pending status, so a row can only ever reach one terminal state.
"""

import asyncio
from datetime import datetime
from typing import Optional, List

from supabase import Client

from backend.config import config
from backend.delivery.errors import StoreError, DeliveryNotFound, InvalidTransition
from backend.delivery.models import DeliveryStatus, ScheduledDelivery
from .client import get_supabase_admin_client


class DeliveryStore:
    """
    Task store for the scheduled_videos table.

    Every Supabase call runs in a worker thread so the event loop that
    drives the scheduler is never blocked by network I/O.
    """

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None):
        self._client = client
        self.table = table or config.SCHEDULED_VIDEOS_TABLE

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_admin_client()
        return self._client

    async def _execute(self, query, action: str):
        try:
            result = await asyncio.to_thread(query.execute)
        except Exception as e:
            raise StoreError(f"Failed to {action}: {e}") from e
        return result.data or []

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(self, delivery: ScheduledDelivery) -> ScheduledDelivery:
        """Insert a new delivery row and return it as stored, id included."""
        rows = await self._execute(
            self.client.table(self.table).insert(delivery.to_row()),
            "insert scheduled delivery",
        )
        if not rows:
            raise StoreError("Insert returned no row")
        return ScheduledDelivery.from_row(rows[0])

    async def update_status(
        self,
        delivery_id: str,
        status: DeliveryStatus,
        sent_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Move a pending delivery to a terminal status.

        Raises DeliveryNotFound if the row is gone and InvalidTransition if
        it has already left pending.
        """
        if not DeliveryStatus.PENDING.can_transition(status):
            raise InvalidTransition(delivery_id, DeliveryStatus.PENDING.value, status.value)

        update = {"status": status.value}
        if status is DeliveryStatus.SENT:
            update["sent_at"] = sent_at.isoformat() if sent_at else None
        else:
            update["error_message"] = error_message

        rows = await self._execute(
            self.client.table(self.table)
            .update(update)
            .eq("id", delivery_id)
            .eq("status", DeliveryStatus.PENDING.value),
            f"update delivery {delivery_id}",
        )
        if rows:
            return

        # Nothing matched: either the row is gone or it is no longer pending
        current = await self.get(delivery_id)
        raise InvalidTransition(delivery_id, current.status.value, status.value)

    async def delete(self, delivery_id: str) -> None:
        rows = await self._execute(
            self.client.table(self.table).delete().eq("id", delivery_id),
            f"delete delivery {delivery_id}",
        )
        if not rows:
            raise DeliveryNotFound(delivery_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get(self, delivery_id: str) -> ScheduledDelivery:
        rows = await self._execute(
            self.client.table(self.table).select("*").eq("id", delivery_id).limit(1),
            f"fetch delivery {delivery_id}",
        )
        if not rows:
            raise DeliveryNotFound(delivery_id)
        return ScheduledDelivery.from_row(rows[0])

    async def list_pending(
        self,
        now: datetime,
        limit: Optional[int] = None,
    ) -> List[ScheduledDelivery]:
        """Pending deliveries with scheduled_at <= now, oldest first."""
        query = (
            self.client.table(self.table)
            .select("*")
            .eq("status", DeliveryStatus.PENDING.value)
            .lte("scheduled_at", now.isoformat())
            .order("scheduled_at")
        )
        if limit:
            query = query.limit(limit)

        rows = await self._execute(query, "fetch due deliveries")
        return [ScheduledDelivery.from_row(row) for row in rows]

    async def list_all(self) -> List[ScheduledDelivery]:
        """All deliveries, latest scheduled_at first."""
        rows = await self._execute(
            self.client.table(self.table).select("*").order("scheduled_at", desc=True),
            "fetch scheduled deliveries",
        )
        return [ScheduledDelivery.from_row(row) for row in rows]
