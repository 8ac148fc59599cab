"""Periodic abandoned cart sweep across all active shops."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cart_reminder.infrastructure.redis import RunLock
from cart_reminder.schemas import SchedulerRunResult, ShopRunEntry
from cart_reminder.services.messaging import TransportFactory, build_ccai_transport
from cart_reminder.services.reminder_dispatcher import ReminderDispatcher
from cart_reminder.services.shop_registry import ShopRegistry

logger = structlog.get_logger()


class AbandonedCartScheduler:
    """Runs the reminder dispatcher for every active shop, one shop at a time.

    Each shop gets its own database session so a failure in one shop cannot
    leave a broken session behind for the next. An optional run lock makes
    overlapping runs skip instead of racing on the same carts.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        transport_factory: TransportFactory = build_ccai_transport,
        run_lock: RunLock | None = None,
    ):
        self.session_factory = session_factory
        self.transport_factory = transport_factory
        self.run_lock = run_lock

    async def list_active_shops(self) -> list[str]:
        async with self.session_factory() as session:
            return await ShopRegistry(session).list_active_domains()

    async def process_shop(self, shop: str) -> ShopRunEntry:
        try:
            async with self.session_factory() as session:
                dispatcher = ReminderDispatcher(session, self.transport_factory)
                result = await dispatcher.process_shop(shop)
        except Exception as e:
            logger.exception("Error processing abandoned carts", shop=shop)
            return ShopRunEntry(shop=shop, success=False, processed=0, error=str(e))

        logger.info("Processed shop", shop=shop, processed=result.processed)
        return ShopRunEntry(
            shop=shop,
            success=result.success,
            processed=result.processed,
            error=result.error,
        )

    async def run(self) -> SchedulerRunResult:
        if self.run_lock is not None and not await self.run_lock.acquire():
            logger.info("Abandoned cart run already in progress, skipping")
            return SchedulerRunResult(total_shops=0, results=[], skipped=True)

        try:
            shops = await self.list_active_shops()
            logger.info("Processing abandoned carts", total_shops=len(shops))

            results = [await self.process_shop(shop) for shop in shops]
            return SchedulerRunResult(total_shops=len(shops), results=results)
        finally:
            if self.run_lock is not None:
                await self.run_lock.release()
