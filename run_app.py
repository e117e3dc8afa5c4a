#!/usr/bin/env python3
"""
Back-Office Analytics Runner
============================

Run the analytics API in development or production mode.

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode, multiple workers
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
    python run_app.py --init-db          # Create tables before starting
"""

import argparse
import asyncio
import os
import sys


def check_environment() -> bool:
    """Check that the required settings are available"""
    print("\n🔍 Checking environment...")

    if os.path.exists(".env"):
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found, reading settings from the environment")

    missing = [name for name in ("DATABASE_URL", "SECRET_KEY") if not os.getenv(name)]
    if missing and not os.path.exists(".env"):
        print(f"❌ Missing required settings: {', '.join(missing)}")
        return False

    return True


def init_database():
    """Create database tables"""
    from backoffice.core.database import init_db, close_db

    async def _run():
        try:
            await init_db()
        finally:
            await close_db()

    asyncio.run(_run())
    print("✅ Database tables created")


def run_app(host: str, port: int, reload: bool, workers: int):
    """Run the FastAPI application"""
    print(f"\n🚀 Starting Back-Office Analytics on {host}:{port}")
    print(f"📖 API Docs: http://{host}:{port}/api/docs")
    print("\n" + "=" * 50)

    import uvicorn
    uvicorn.run(
        "backoffice.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else workers,
        log_level="info"
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Back-Office Analytics Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--workers", type=int, default=4, help="Worker processes in prod mode (default: 4)")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    parser.add_argument("--init-db", action="store_true", help="Create database tables before starting")

    args = parser.parse_args()

    if not check_environment():
        return 1

    if args.init_db:
        init_database()

    reload = not args.no_reload and args.mode != "prod"
    run_app(args.host, args.port, reload, args.workers)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
        sys.exit(0)
