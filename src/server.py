"""Protean Engine runner for SouqHub domains.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Usage:
    python src/server.py                       # Run every domain engine
    python src/server.py --domain fulfillment  # Run only the fulfillment engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

from shared.domains import DOMAIN_NAMES, load_domain
from shared.logging import configure_logging


async def run(domain_names):
    engines = [Engine(load_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="SouqHub Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        action="append",
        help="Run only the given domain engine(s) (default: run all)",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(args.domain or DOMAIN_NAMES))


if __name__ == "__main__":
    main()
