"""
Main entry point for running Magnus as a UCI engine.

Usage:
    python -m magnus_engine.uci
"""

from magnus_engine.uci.interface import main

if __name__ == "__main__":
    main()
