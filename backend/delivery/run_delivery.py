#!/usr/bin/env python3
"""
Standalone delivery scheduler process for VideoCapsule.

Runs the delivery scheduler outside the web process. Use this when the
API is deployed with ENABLE_DELIVERY_SCHEDULER=false. Run a single
instance only: there is no cross-process lock.

Usage:
    python -m backend.delivery.run_delivery
"""

import asyncio
import signal
import sys

from backend.config import config
from backend.delivery.scheduler import start_delivery_scheduler, stop_delivery_scheduler
from backend.utils.logging import configure_logging, scheduler_logger as logger


async def main():
    """Run the delivery scheduler until SIGTERM/SIGINT."""
    configure_logging(config.LOG_LEVEL)

    print("=" * 50)
    print("VideoCapsule Delivery Scheduler")
    print("=" * 50)

    if not config.supabase_configured:
        print("❌ ERROR: SUPABASE_URL and SUPABASE_SERVICE_KEY are required")
        sys.exit(1)

    if not config.email_configured:
        logger.warning("RESEND_API_KEY not configured - every delivery will fail")

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler():
        print("\n👋 Shutting down delivery scheduler...")
        stop_requested.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_handler)

    scheduler = start_delivery_scheduler()
    print(f"✅ Delivery scheduler running (every {scheduler.check_interval:g}s). Press Ctrl+C to stop.")

    # First pass right away instead of waiting a full interval
    await scheduler.run_tick()

    await stop_requested.wait()
    await stop_delivery_scheduler()

    print("Delivery scheduler stopped.")


if __name__ == "__main__":
    asyncio.run(main())
