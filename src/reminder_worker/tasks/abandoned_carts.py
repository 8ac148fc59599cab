"""Abandoned cart reminder tasks."""

import asyncio

import structlog
from celery import shared_task

from cart_reminder.config import get_settings
from cart_reminder.infrastructure.database.connection import (
    create_session_factory,
    get_async_engine,
)
from cart_reminder.infrastructure.redis import RunLock, create_redis_client
from cart_reminder.services.scheduler import AbandonedCartScheduler
from shared.constants import ABANDONED_CART_RUN_LOCK_KEY

logger = structlog.get_logger()


async def run_abandoned_cart_sweep() -> dict:
    """Sweep every active shop once.

    Builds its own engine and Redis client: each Celery task runs in a fresh
    event loop and pooled connections cannot cross loops.
    """
    settings = get_settings()
    engine = get_async_engine()
    redis_client = await create_redis_client()
    try:
        scheduler = AbandonedCartScheduler(
            create_session_factory(engine),
            run_lock=RunLock(
                redis_client,
                ABANDONED_CART_RUN_LOCK_KEY,
                ttl_seconds=settings.abandoned_cart_lock_ttl_seconds,
            ),
        )
        result = await scheduler.run()
        return result.to_json_dict()
    finally:
        if redis_client is not None:
            await redis_client.aclose()
        await engine.dispose()


async def run_single_shop(shop_domain: str) -> dict:
    engine = get_async_engine()
    try:
        scheduler = AbandonedCartScheduler(create_session_factory(engine))
        entry = await scheduler.process_shop(shop_domain)
        return entry.to_json_dict()
    finally:
        await engine.dispose()


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def process_abandoned_carts(self) -> dict:
    """
    Send reminders for abandoned carts across all active shops.

    Runs on the beat schedule. Shops are processed one after another; a
    failing shop is reported in the summary and does not stop the run.

    Returns:
        dict: ``totalShops`` and one result per shop
    """
    logger.info("Checking for abandoned carts")
    try:
        summary = asyncio.run(run_abandoned_cart_sweep())
    except Exception as exc:
        # Shop listing or engine setup failed; nothing was processed
        logger.exception("Abandoned cart sweep failed")
        raise self.retry(exc=exc)

    logger.info(
        "Abandoned cart sweep finished",
        total_shops=summary["totalShops"],
        skipped=summary["skipped"],
    )
    return summary


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def process_shop_abandoned_carts(self, shop_domain: str) -> dict:
    """
    Send reminders for one shop's abandoned carts.

    Args:
        shop_domain: The shop to process

    Returns:
        dict: The shop's run entry
    """
    logger.info("Processing abandoned carts for shop", shop=shop_domain)
    return asyncio.run(run_single_shop(shop_domain))
