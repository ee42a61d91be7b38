#!/usr/bin/env python3
"""
Supabase Setup Helper for VideoCapsule

Verifies the Supabase connection, checks that the scheduled_videos
table exists and creates the public videos bucket if it is missing.

Usage:
    python scripts/setup_supabase.py

Requirements:
    - Set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables
    - Or create a .env file with these values
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.config import config  # noqa: E402

MIGRATION = "supabase/migrations/001_create_scheduled_videos.sql"


def check_table_ready() -> bool:
    """Check that the scheduled videos table is reachable."""
    from backend.database.client import check_table

    print(f"\n🔗 Connecting to: {config.SUPABASE_URL}")
    problem = check_table()
    if problem is None:
        print(f"✅ Table '{config.SCHEDULED_VIDEOS_TABLE}' exists")
        return True

    print(f"❌ {problem}")
    if "does not exist" in problem:
        print(f"   Run {MIGRATION} in the Supabase SQL Editor")
    return False


def check_bucket() -> bool:
    """Create the videos bucket if needed."""
    from backend.database.media import MediaStore

    try:
        created = MediaStore().ensure_bucket()
    except Exception as e:
        print(f"❌ Could not check storage buckets: {e}")
        return False

    if created:
        print(f"✅ Bucket '{config.VIDEO_BUCKET}' created")
    else:
        print(f"✅ Bucket '{config.VIDEO_BUCKET}' ready")
    return True


def print_env_template():
    print("\n" + "=" * 60)
    print("🔧 REQUIRED ENVIRONMENT VARIABLES")
    print("=" * 60)
    print("""
# Supabase (from your Supabase Dashboard > Settings > API)
SUPABASE_URL=https://xxxxx.supabase.co
SUPABASE_SERVICE_KEY=eyJhbGci...

# Resend
RESEND_API_KEY=re_...
EMAIL_FROM_ADDRESS=videos@yourdomain.com
""")


def main():
    print("=" * 60)
    print("🚀 VideoCapsule - Supabase Setup Helper")
    print("=" * 60)

    if not config.supabase_configured:
        print("\n❌ Missing Supabase credentials!")
        print_env_template()
        return 1

    table_ok = check_table_ready()
    bucket_ok = check_bucket()

    if table_ok and bucket_ok:
        print("\n✅ Supabase is ready for VideoCapsule.")
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
