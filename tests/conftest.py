# tests/conftest.py
import os

# Must be set before teashop modules read settings.
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["MANAGER_EMAILS"] = "owner@shop.com"
os.environ["MANAGER_UPGRADE_CODE"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from teashop.core.security import create_access_token, hash_password
from teashop.database import get_session
from teashop.main import app
from teashop.models.product import Category, Product
from teashop.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def _get_session_override():
        yield session

    app.dependency_overrides[get_session] = _get_session_override
    # No context manager: skip lifespan (it targets the module engine)
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(session: Session, email: str, role: str = "user", password: str | None = None) -> User:
    user = User(
        email=email,
        username=email.split("@")[0],
        role=role,
        password_hash=hash_password(password) if password else None,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def manager(session) -> User:
    return make_user(session, "manager@shop.com", role="manager", password="manager-pass")


@pytest.fixture
def customer(session) -> User:
    return make_user(session, "alice@example.com", password="alice-pass")


@pytest.fixture
def guest(session) -> User:
    return make_user(session, "guest@shop.com")


@pytest.fixture
def manager_headers(manager) -> dict[str, str]:
    return auth_header(manager)


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_header(customer)


@pytest.fixture
def drinks(session) -> Category:
    category = Category(name="Tea", emoji="🍵")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def milk_tea(session, drinks) -> Product:
    product = Product(
        name="Milk Tea",
        description="Black tea with milk",
        price=12.0,
        image_url="🧋",
        category=drinks.name,
        stock=5,
        has_sweetness=True,
        has_ice_level=True,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product
