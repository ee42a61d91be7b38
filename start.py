#!/usr/bin/env python3
"""
VideoCapsule Service Entrypoint

This script determines which process to run based on the SERVICE_TYPE
environment variable. Set SERVICE_TYPE in each service's settings.

SERVICE_TYPE values:
  - web (default): Run the FastAPI web server via uvicorn
  - delivery: Run the standalone email delivery scheduler
"""

import os
import sys

SERVICE_TYPE = os.environ.get("SERVICE_TYPE", "web")
PORT = os.environ.get("PORT", "8080")

print("=" * 50)
print(f"VideoCapsule Service: {SERVICE_TYPE}")
print("=" * 50)

if SERVICE_TYPE == "web":
    print("Starting web server (uvicorn)...")
    # A single worker: the in-process delivery scheduler must not run twice
    cmd = [
        "uvicorn", "backend.api.main:app",
        "--host", "0.0.0.0",
        "--port", PORT,
        "--timeout-graceful-shutdown", "120"
    ]
elif SERVICE_TYPE == "delivery":
    print("Starting email delivery scheduler...")
    cmd = ["python", "-m", "backend.delivery.run_delivery"]
else:
    print(f"ERROR: Unknown SERVICE_TYPE: {SERVICE_TYPE}")
    print("Valid values: web, delivery")
    sys.exit(1)

print(f"Running: {' '.join(cmd)}")
print("=" * 50)

# Replace this process with the actual command
os.execvp(cmd[0], cmd)
