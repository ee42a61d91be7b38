"""
FastAPI application for the VideoCapsule API.

This module sets up the FastAPI app with routes, middleware and the
delivery scheduler lifecycle.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import config
from backend.routes.logs import router as logs_router
from backend.routes.schedules import router as schedules_router
from backend.utils.logging import configure_logging


# Create FastAPI app
app = FastAPI(
    title="VideoCapsule API",
    description="Schedule video messages for email delivery at a future time",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedules_router)
app.include_router(logs_router)


# ===== Info Endpoints =====

@app.get("/health")
async def health():
    """Liveness check; also reports whether the delivery scheduler is running."""
    from backend.delivery.scheduler import get_delivery_scheduler

    scheduler = get_delivery_scheduler()
    return {
        "status": "ok",
        "scheduler_running": bool(scheduler and scheduler.running),
    }


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": "VideoCapsule API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "endpoints": {
            "schedule_video": "POST /api/schedule-video (multipart: video, recipientEmail, scheduledAt, subject, message)",
            "list_scheduled": "GET /api/scheduled-videos",
            "get_scheduled": "GET /api/scheduled-videos/{id}",
            "delete_scheduled": "DELETE /api/scheduled-videos/{id}",
            "logs": "GET /api/logs",
            "error_logs": "GET /api/logs/errors",
        }
    }


# ===== Startup Event =====

@app.on_event("startup")
async def startup_event():
    """Check configuration, provision the video bucket and start the scheduler."""
    configure_logging(config.LOG_LEVEL)

    print("=" * 60)
    print("VideoCapsule API Starting...")
    print("=" * 60)

    print("\n🔍 Environment Check:")
    print(f"   Supabase: {'✓ Configured' if config.supabase_configured else '✗ Missing'}")
    print(f"   Resend: {'✓ Configured' if config.email_configured else '✗ Missing'}")
    print(f"   ENVIRONMENT: {config.ENVIRONMENT}")

    if config.DEV_MODE and not config.api_keys_list:
        print("   ⚠️  DEV MODE: Authentication BYPASSED (no API keys configured)")
    else:
        print(f"   ✓ Authentication: ENABLED ({len(config.api_keys_list)} API key(s) configured)")

    if not config.supabase_configured:
        print("⚠️  Supabase not configured - scheduling and delivery unavailable")
        return

    from backend.database.client import check_table
    problem = check_table()
    if problem:
        print(f"⚠️  {config.SCHEDULED_VIDEOS_TABLE}: {problem}")
    else:
        print(f"✓ Table '{config.SCHEDULED_VIDEOS_TABLE}' reachable")

    try:
        from backend.database.media import MediaStore
        created = MediaStore().ensure_bucket()
        print(f"✓ Video bucket '{config.VIDEO_BUCKET}' {'created' if created else 'ready'}")
    except Exception as e:
        print(f"⚠️  Could not verify video bucket: {e}")

    if config.ENABLE_DELIVERY_SCHEDULER:
        try:
            from backend.delivery.scheduler import start_delivery_scheduler
            start_delivery_scheduler()
            print(f"✓ Delivery scheduler started (checks every {config.DELIVERY_CHECK_INTERVAL_SECONDS:g}s)")
        except Exception as e:
            print(f"⚠️  Error starting delivery scheduler: {e}")
    else:
        print("ℹ️  Delivery scheduler disabled (ENABLE_DELIVERY_SCHEDULER=false)")

    api_port = os.getenv('PORT', str(config.API_PORT))
    print("=" * 60)
    print(f"API available at: http://{config.API_HOST}:{api_port}")
    print("=" * 60)


# ===== Shutdown Event =====

@app.on_event("shutdown")
async def shutdown_event():
    """Stop the delivery scheduler, letting an in-flight tick finish."""
    from backend.delivery.scheduler import stop_delivery_scheduler

    print("🔄 Stopping delivery scheduler...")
    await stop_delivery_scheduler()
    print("Shutdown complete")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.api.main:app",
        host=config.API_HOST,
        port=int(os.getenv("PORT", config.API_PORT)),
        log_level=config.LOG_LEVEL.lower()
    )
