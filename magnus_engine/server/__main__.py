"""
Run the move service.

Usage:
    python -m magnus_engine.server [--host 0.0.0.0] [--port 8000]
"""

import argparse
import logging

import uvicorn

from magnus_engine.server.app import create_app


def main():
    parser = argparse.ArgumentParser(description="Magnus move service")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
