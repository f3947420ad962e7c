"""
Shared fixtures for the order engine test suite.

Each test gets its own SQLite file database (aiosqlite, BEGIN IMMEDIATE
transactions) seeded with two customers and two catalog services.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy import select, func

from laundry.config import Settings
from laundry.database import build_engine, build_session_factory, init_db
from laundry.main import create_app
from laundry.models import Category, Customer, Order, Service
from laundry.models.order_sequence import OrderSequence
from laundry.schemas.order import OrderCreate, OrderItemCreate


@dataclass
class SeedData:
    customer_id: int
    other_customer_id: int
    shirt_id: int
    saree_id: int


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        SECRET_KEY="test-secret-key",
        DEBUG=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory) -> SeedData:
    async with session_factory() as session:
        customer = Customer(name="Asha Verma", mobile="9876543210", city="Pune")
        other = Customer(name="Ravi Kumar", mobile="9123456780")
        category = Category(name="Wash & Fold")
        session.add_all([customer, other, category])
        await session.flush()

        shirt = Service(code="SHIRT", name="Shirt Wash", category_id=category.id, rate1=Decimal("100.00"))
        saree = Service(code="SAREE", name="Saree Dry Clean", category_id=category.id, rate1=Decimal("50.00"))
        session.add_all([shirt, saree])
        await session.commit()

        return SeedData(
            customer_id=customer.id,
            other_customer_id=other.id,
            shirt_id=shirt.id,
            saree_id=saree.id,
        )


# ============================================================================
# Helpers
# ============================================================================


def current_period() -> str:
    return OrderSequence.get_period(datetime.now(timezone.utc))


def make_order_create(
    seed: SeedData,
    customer_id: Optional[int] = None,
    items: Optional[List[OrderItemCreate]] = None,
    **overrides,
) -> OrderCreate:
    """2 x 100.00 shirts + 1 x 50.00 saree, 10% discount, 5% tax, 100.00 advance."""
    if items is None:
        items = [
            OrderItemCreate(service_id=seed.shirt_id, quantity=2, rate=Decimal("100.00")),
            OrderItemCreate(service_id=seed.saree_id, quantity=1, rate=Decimal("50.00")),
        ]
    data = dict(
        customer_id=customer_id or seed.customer_id,
        items=items,
        discount_percentage=Decimal("10"),
        tax_percentage=Decimal("5"),
        advance_paid=Decimal("100.00"),
    )
    data.update(overrides)
    return OrderCreate(**data)


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


async def insert_raw_order(session_factory, customer_id: int, order_number: str) -> int:
    """Insert an order row directly, bypassing the counter."""
    async with session_factory() as session:
        order = Order(
            order_number=order_number,
            customer_id=customer_id,
            subtotal=Decimal("0.00"),
            total_amount=Decimal("0.00"),
            remaining_amount=Decimal("0.00"),
        )
        session.add(order)
        await session.commit()
        return order.id


# ============================================================================
# HTTP
# ============================================================================


def make_token(settings: Settings, subject: str = "user-1", token_type: str = "access") -> str:
    payload = {
        "sub": subject,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def auth_headers(settings) -> dict:
    return {"Authorization": f"Bearer {make_token(settings)}"}


@pytest.fixture
async def app(settings, engine):
    application = create_app(settings)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
