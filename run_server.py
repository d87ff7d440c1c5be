#!/usr/bin/env python3
"""
Serve the analysis endpoint over HTTP.

Usage:
    python run_server.py
    python run_server.py --host 0.0.0.0 --port 8080
"""

import argparse

from dotenv import load_dotenv
load_dotenv()

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the Veritas analysis API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "veritas.api:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
