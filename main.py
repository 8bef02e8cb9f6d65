#!/usr/bin/env python3
"""
Run the BaatCheet API server.

Usage:
    python main.py
    python main.py --host 0.0.0.0 --port 9990 --reload
"""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="BaatCheet API server")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "9990")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
