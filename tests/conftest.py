"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import timedelta
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cart_reminder.api.deps import get_transport_factory
from cart_reminder.config import Settings
from cart_reminder.exceptions import SmsTransportError
from cart_reminder.infrastructure.database.connection import (
    create_session_factory,
    get_session,
)
from cart_reminder.infrastructure.database.models import (
    Base,
    Cart,
    Shop,
    ShopSettings,
    utcnow,
)
from cart_reminder.main import create_app

SHOP = "test-shop.myshopify.com"


class FakeSmsTransport:
    """Records sends; raises for phones listed in ``fail_phones``."""

    def __init__(self, fail_phones: set[str] | None = None):
        self.fail_phones = fail_phones or set()
        self.calls: list[dict[str, str]] = []

    async def send_single(
        self,
        first_name: str,
        last_name: str,
        phone: str,
        message: str,
        title: str,
    ) -> dict[str, Any]:
        self.calls.append(
            {
                "first_name": first_name,
                "last_name": last_name,
                "phone": phone,
                "message": message,
                "title": title,
            }
        )
        if phone in self.fail_phones:
            raise SmsTransportError("API Error")
        return {"id": f"mock-message-{len(self.calls)}", "status": "sent"}


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        database_url_override="sqlite+aiosqlite://",
        default_ccai_client_id="",
        default_ccai_api_key="",
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def sms_transport() -> FakeSmsTransport:
    return FakeSmsTransport()


@pytest.fixture
def transport_factory(sms_transport: FakeSmsTransport) -> Callable[[str, str], FakeSmsTransport]:
    """Factory handing out the shared fake transport, recording credentials."""

    def factory(client_id: str, api_key: str) -> FakeSmsTransport:
        sms_transport.credentials = (client_id, api_key)
        return sms_transport

    return factory


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    transport_factory: Callable[[str, str], FakeSmsTransport],
) -> Any:
    """Create test application bound to the in-memory database."""

    async def get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session
            await session.commit()

    app = create_app()
    app.dependency_overrides[get_session] = get_test_session
    app.dependency_overrides[get_transport_factory] = lambda: transport_factory
    return app


@pytest_asyncio.fixture
async def async_client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create asynchronous test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def shop_headers() -> dict[str, str]:
    return {"X-Shopify-Shop-Domain": SHOP}


@pytest.fixture
def sample_cart_payload() -> dict:
    """Shopify carts/create payload."""
    return {
        "id": "123456",
        "token": "abc123",
        "line_items": [{"id": 1, "title": "Wool Socks", "quantity": 2, "price": "12.00"}],
        "currency": "USD",
        "customer": {
            "id": 987,
            "first_name": "John",
            "last_name": "Doe",
            "email": "john@example.com",
            "phone": "5551234567",
        },
    }


@pytest.fixture
def make_cart(session: AsyncSession) -> Callable[..., Awaitable[Cart]]:
    """Insert a cart whose last update was ``hours_old`` hours ago."""

    async def _make_cart(
        cart_id: str,
        shop: str = SHOP,
        hours_old: float = 48,
        phone: str | None = "5551234567",
        first_name: str | None = "John",
        last_name: str | None = "Doe",
        **flags: Any,
    ) -> Cart:
        updated = utcnow() - timedelta(hours=hours_old)
        cart = Cart(
            shop_domain=shop,
            cart_id=cart_id,
            cart_token=f"token-{cart_id}",
            customer_first_name=first_name,
            customer_last_name=last_name,
            customer_phone=phone,
            cart_data={"id": cart_id},
            created_at=updated,
            updated_at=updated,
            **flags,
        )
        session.add(cart)
        await session.commit()
        return cart

    return _make_cart


@pytest.fixture
def configure_shop(session: AsyncSession) -> Callable[..., Awaitable[ShopSettings]]:
    """Register an active shop with reminder settings."""

    async def _configure_shop(
        shop: str = SHOP,
        enabled: bool = True,
        client_id: str = "test-client-id",
        api_key: str = "test-api-key",
        hour_threshold: int = 24,
        shop_name: str = "Test Shop",
        message_template: str | None = None,
        active: bool = True,
    ) -> ShopSettings:
        session.add(Shop(shop_domain=shop, is_active=active))
        settings = ShopSettings(
            shop_domain=shop,
            shop_name=shop_name,
            reminders_enabled=enabled,
            hour_threshold=hour_threshold,
            ccai_client_id=client_id,
            ccai_api_key=api_key,
        )
        if message_template is not None:
            settings.message_template = message_template
        session.add(settings)
        await session.commit()
        return settings

    return _configure_shop


@pytest.fixture
def reload_cart(session: AsyncSession) -> Callable[..., Awaitable[Cart | None]]:
    """Fetch a cart fresh from the database, bypassing the identity map."""

    async def _reload_cart(cart_id: str, shop: str = SHOP) -> Cart | None:
        result = await session.execute(
            select(Cart)
            .where(Cart.shop_domain == shop, Cart.cart_id == cart_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    return _reload_cart
