#!/usr/bin/env python3
"""
Entry point for running as module: python -m gfc
"""

import argparse
import asyncio

from gfc.app import main


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gfc",
        description="Receives Gitea webhook events and triggers Fly builds.",
    )
    parser.add_argument(
        "-D",
        "--dev",
        action="store_true",
        help="Development mode (disables authorization)",
    )
    return parser.parse_args(argv)


def run(argv=None) -> None:
    args = parse_args(argv)
    try:
        asyncio.run(main(dev_mode=args.dev))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
