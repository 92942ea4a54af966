#!/usr/bin/env python3
"""
Launch script for the debris tracker API.

Usage:
    python scripts/run_server.py              # host/port from config/api.yaml
    python scripts/run_server.py --dev        # hot reload
    python scripts/run_server.py --offline    # simulated data only
"""

import argparse
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure project root is on PYTHONPATH
sys.path.insert(0, str(PROJECT_ROOT))
os.chdir(PROJECT_ROOT)


def main():
    from debris_tracker.utils.config_loader import Config

    config = Config(Path(os.environ.get("DEBRIS_TRACKER_CONFIG_DIR", "config")))
    config.load_all()

    parser = argparse.ArgumentParser(description="Debris Tracker API")
    parser.add_argument("--dev", action="store_true", help="Run with hot reload")
    parser.add_argument("--host", default=config.api.host, help=f"Host to bind (default: {config.api.host})")
    parser.add_argument("--port", type=int, default=config.api.port, help=f"Port (default: {config.api.port})")
    parser.add_argument("--offline", action="store_true", help="Serve simulated data without fetching")
    args = parser.parse_args()

    if args.offline:
        os.environ["DEBRIS_TRACKER_OFFLINE"] = "true"

    print("Starting Debris Tracker API...")
    print(f"  URL: http://{args.host}:{args.port}")
    print()

    import uvicorn
    uvicorn.run(
        "debris_tracker.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.dev or config.api.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
