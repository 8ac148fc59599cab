#!/usr/bin/env python3
"""CLI script to run the abandoned cart reminder sweep once, outside Celery.

Usage:
    python scripts/run_reminders.py                    # all active shops
    python scripts/run_reminders.py my-store.myshopify.com
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import orjson
import structlog

from cart_reminder.log_config import configure_logging
from reminder_worker.tasks.abandoned_carts import run_abandoned_cart_sweep, run_single_shop

logger = structlog.get_logger()


async def main(shop: str | None = None):
    """Main sweep function."""
    if shop:
        logger.info("Running reminders for one shop", shop=shop)
        summary = await run_single_shop(shop)
    else:
        logger.info("Running reminders for all active shops")
        summary = await run_abandoned_cart_sweep()

    print(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
