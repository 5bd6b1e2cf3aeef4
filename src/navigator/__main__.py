"""Entry point for running a WebDriver service from the command line."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import settings

PRESETS = ("chrome", "gecko", "edge")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="navigator",
        description="Start a WebDriver service and keep it running until interrupted.",
    )
    parser.add_argument(
        "driver",
        help=f"driver preset ({', '.join(PRESETS)}) or a command template, eg. 'chromedriver --port={{Port}}'",
    )
    parser.add_argument(
        "--url",
        default="http://{Address}",
        help="service URL template for a command template (default: %(default)s)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="seconds to wait for boot")
    parser.add_argument("--debug", action="store_true", help="log requests and driver output")
    return parser.parse_args(argv)


def build_driver(args: argparse.Namespace):
    from .core.driver import WebDriver, chrome_driver, edge_driver, gecko_driver

    options = {"timeout": args.timeout, "debug": args.debug or None}
    if args.driver == "chrome":
        return chrome_driver(**options)
    if args.driver == "gecko":
        return gecko_driver(**options)
    if args.driver == "edge":
        return edge_driver(**options)
    return WebDriver(args.url, args.driver.split(), **options)


async def serve(args: argparse.Namespace) -> None:
    driver = build_driver(args)
    async with driver:
        print(driver.url, flush=True)
        await asyncio.Event().wait()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.log_level_number,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        asyncio.run(serve(args))
        return 0
    except KeyboardInterrupt:
        print("\nShutdown requested...")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
