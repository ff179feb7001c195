#!/usr/bin/env python3
"""
Administrative commands for the shared cache.

Usage:
  python cache_admin.py stats
  python cache_admin.py health
  python cache_admin.py invalidate "properties:search:*"
  python cache_admin.py invalidate-resources condominiums amenities
  python cache_admin.py clear --yes

Connection settings come from the environment (REDIS_URL / UPSTASH_REDIS_URL).
Results are printed as JSON on stdout.
"""
import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from core.container import Container
from core.health import get_health_status, set_startup_time
from core.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and invalidate the shared cache")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stats", help="Show backend key count and memory usage")
    sub.add_parser("health", help="Run the cache round-trip health check")

    inv = sub.add_parser("invalidate", help="Delete a key or a `*` wildcard pattern")
    inv.add_argument("pattern")

    res = sub.add_parser("invalidate-resources", help="Invalidate named resource lists")
    res.add_argument("resources", nargs="+")

    clr = sub.add_parser("clear", help="Flush the entire cache database")
    clr.add_argument("--yes", action="store_true", help="Confirm the full flush")
    return parser


async def run(args: argparse.Namespace, container: Container) -> Dict[str, Any]:
    """Execute one admin command against a started cache service."""
    cache = container.cache()
    await cache.startup()
    try:
        if args.command == "stats":
            return {"backend": cache.backend, **(await cache.get_stats()).to_dict()}
        if args.command == "health":
            return await get_health_status(cache)
        if args.command == "invalidate":
            return {"pattern": args.pattern, "deleted": await cache.invalidate(args.pattern)}
        if args.command == "invalidate-resources":
            await container.cache_invalidator().invalidate_multiple(*args.resources)
            return {"resources": args.resources}
        if args.command == "clear":
            if not args.yes:
                return {"error": "refusing to flush the cache without --yes"}
            return {"cleared": await cache.clear()}
        return {"error": f"unknown command: {args.command}"}
    finally:
        await cache.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    container = Container()
    # stdout carries the JSON result
    configure_logging(container.settings(), stream=sys.stderr)
    set_startup_time()

    result = asyncio.run(run(args, container))
    print(json.dumps(result, indent=2, default=str))
    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(main())
