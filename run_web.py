#!/usr/bin/env python3
"""
Main entry point for the Courtside rotation timer web API.

This script launches the Flask-based JSON server.
"""
import argparse
import logging
import os

from courtside.ui.web_app import run_web_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the Courtside rotation timer API")
    parser.add_argument("--host", default="127.0.0.1", help="Address to bind to")
    parser.add_argument("--port", type=int, default=7122, help="Port to listen on")
    parser.add_argument(
        "--data-dir",
        default=os.environ.get("COURTSIDE_DATA_DIR"),
        help="Directory for game records (default: $COURTSIDE_DATA_DIR, in memory if unset)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_app(host=args.host, port=args.port, data_dir=args.data_dir)


if __name__ == "__main__":
    main()
