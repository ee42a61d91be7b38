"""
Delivery Scheduler

Wakes up on a fixed interval, selects due deliveries and hands each to
the DeliveryExecutor. Ticks never overlap; a tick that raises is logged
and the next tick runs as usual.
"""

import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from backend.delivery.executor import DeliveryExecutor
from backend.delivery.models import DeliveryStatus, ScheduledDelivery, utcnow
from backend.delivery.selector import PendingSource, select_due_deliveries
from backend.utils.logging import scheduler_logger as logger

JOB_ID = "delivery_scheduler"


class DeliveryScheduler:
    """
    Background loop that sends scheduled video emails.

    - Runs every check_interval seconds (default one minute)
    - Selects pending deliveries where scheduled_at <= now, oldest first
    - Dispatches them with at most `concurrency` sends in flight
    - start() on a running scheduler is a no-op; stop() waits for the
      in-flight tick to finish
    """

    def __init__(
        self,
        store: PendingSource,
        executor: DeliveryExecutor,
        check_interval_seconds: float = 60,
        batch_limit: Optional[int] = 20,
        concurrency: int = 1,
        send_spacing_seconds: float = 0.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.executor = executor
        self.check_interval = check_interval_seconds
        self.batch_limit = batch_limit
        self.concurrency = max(1, concurrency)
        self.send_spacing = send_spacing_seconds
        self.clock = clock

        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self._is_processing = False
        self._idle = asyncio.Event()
        self._idle.set()
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """
        Start the periodic job. Must be called with an event loop running.

        Returns False (and does nothing) if the scheduler is already running.
        """
        if self._running:
            logger.warning("Delivery scheduler already running")
            return False

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._scheduled_tick,
            trigger=IntervalTrigger(seconds=self.check_interval),
            id=JOB_ID,
            name="Send scheduled video deliveries",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self._running = True
        logger.info("Delivery scheduler started", check_interval=self.check_interval)
        return True

    async def stop(self) -> None:
        """
        Stop scheduling new ticks and wait for the current one to finish.

        The APScheduler executor cancels running jobs on shutdown, so the
        in-flight tick is awaited before the scheduler is shut down.
        """
        if not self._running:
            return

        self._running = False
        scheduler, self.scheduler = self.scheduler, None
        if scheduler is not None and scheduler.running:
            scheduler.pause()

        await self._idle.wait()

        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        logger.info("Delivery scheduler stopped")

    async def _scheduled_tick(self) -> None:
        if not self._running:
            return
        await self.run_tick()

    async def run_tick(self) -> List[DeliveryStatus]:
        """
        One scheduler pass: select due deliveries and dispatch each.

        Returns the resulting status per dispatched delivery, in selection order.
        """
        if self._is_processing:
            return []

        self._is_processing = True
        self._idle.clear()
        self.tick_count += 1

        try:
            due = await select_due_deliveries(self.store, self.clock(), limit=self.batch_limit)
            if not due:
                return []
            return await self._dispatch_batch(due)

        except Exception as e:
            logger.error(f"Delivery scheduler error: {e}", error=str(e))
            return []
        finally:
            self._is_processing = False
            self._idle.set()

    async def _dispatch_batch(self, batch: List[ScheduledDelivery]) -> List[DeliveryStatus]:
        if self.concurrency == 1:
            results = []
            for i, delivery in enumerate(batch):
                results.append(await self.executor.dispatch(delivery))
                if self.send_spacing and i < len(batch) - 1:
                    await asyncio.sleep(self.send_spacing)
            return results

        semaphore = asyncio.Semaphore(self.concurrency)

        async def dispatch_one(delivery: ScheduledDelivery) -> DeliveryStatus:
            async with semaphore:
                status = await self.executor.dispatch(delivery)
                if self.send_spacing:
                    await asyncio.sleep(self.send_spacing)
                return status

        return list(await asyncio.gather(*(dispatch_one(d) for d in batch)))


# Global instance
_delivery_scheduler: Optional[DeliveryScheduler] = None


def build_delivery_scheduler() -> DeliveryScheduler:
    """Wire the scheduler to Supabase and Resend using the app config."""
    from backend.config import config
    from backend.database.deliveries import DeliveryStore
    from backend.email.gateway import ResendGateway

    store = DeliveryStore()
    executor = DeliveryExecutor(
        store,
        ResendGateway(),
        send_timeout=config.DELIVERY_SEND_TIMEOUT_SECONDS,
    )
    return DeliveryScheduler(
        store,
        executor,
        check_interval_seconds=config.DELIVERY_CHECK_INTERVAL_SECONDS,
        batch_limit=config.DELIVERY_BATCH_LIMIT,
        concurrency=config.DELIVERY_CONCURRENCY,
        send_spacing_seconds=config.DELIVERY_SEND_SPACING_SECONDS,
    )


def start_delivery_scheduler(scheduler: Optional[DeliveryScheduler] = None) -> DeliveryScheduler:
    """Start the process-wide scheduler. Call during FastAPI startup."""
    global _delivery_scheduler

    if _delivery_scheduler is None:
        _delivery_scheduler = scheduler or build_delivery_scheduler()
    _delivery_scheduler.start()
    return _delivery_scheduler


async def stop_delivery_scheduler() -> None:
    """Stop the process-wide scheduler. Call during FastAPI shutdown."""
    global _delivery_scheduler

    if _delivery_scheduler is not None:
        await _delivery_scheduler.stop()
        _delivery_scheduler = None


def get_delivery_scheduler() -> Optional[DeliveryScheduler]:
    """Get the current scheduler instance."""
    return _delivery_scheduler
