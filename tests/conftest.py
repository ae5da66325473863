import os
import tempfile

# настройки читаются при импорте пакета, поэтому окружение задаём до импортов
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "food_ordering_tests.db"),
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from food_ordering.db.base import Base  # noqa: E402
from food_ordering.db.session import get_async_session  # noqa: E402
from food_ordering.main import app  # noqa: E402
from food_ordering.models import CartItem, FoodItem, RoleEnum, User  # noqa: E402
from food_ordering.security import create_access_token, hash_password  # noqa: E402
from food_ordering.services.audit import audit_logger  # noqa: E402

# один хэш на все тестовые пользователи - bcrypt медленный
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def audit(session_factory):
    previous = audit_logger.bind(session_factory)
    yield audit_logger
    await audit_logger.drain()
    audit_logger.bind(previous)


@pytest.fixture
async def client(session_factory, audit):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make(name="Alice", email=None, role=RoleEnum.user, **fields):
        async with session_factory() as session:
            user = User(
                name=name,
                email=email or f"{name.lower()}@example.com",
                password_hash=PASSWORD_HASH,
                role=role,
                **fields,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest.fixture
def make_food(session_factory):
    async def _make(name="Margherita", price="100.00", category="Pizza", **fields):
        fields.setdefault("description", f"{name} description")
        async with session_factory() as session:
            food = FoodItem(name=name, price=Decimal(price), category=category, **fields)
            session.add(food)
            await session.commit()
            return food

    return _make


@pytest.fixture
def add_cart_entry(session_factory):
    async def _add(user, food, quantity=1, size="Regular", price=None):
        async with session_factory() as session:
            entry = CartItem(
                user_id=user.id,
                food_id=food.id,
                name=food.name,
                category=food.category,
                price=Decimal(price) if price is not None else food.price,
                size=size,
                quantity=quantity,
            )
            session.add(entry)
            await session.commit()
            return entry

    return _add


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
async def customer(make_user):
    return await make_user("Alice", address="221B Baker Street")


@pytest.fixture
async def admin(make_user):
    return await make_user("Admin", role=RoleEnum.admin)
