"""Shared pytest fixtures for marketplace tests."""

import os

# Must be set before the application modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import pawpal_market.models  # noqa: F401
from pawpal_market.api.deps import get_auth_client, get_event_publisher
from pawpal_market.database import Base, get_db
from pawpal_market.main import app
from pawpal_market.models.product import Product
from pawpal_market.services.auth_client import CurrentUser
from pawpal_market.services.exceptions import AuthenticationError


ALICE = CurrentUser(id=1, name="Alice", email="alice@example.com", role="user")
BOB = CurrentUser(id=2, name="Bob", email="bob@example.com", role="user")
ADMIN = CurrentUser(id=99, name="Admin", email="admin@example.com", role="admin")

TOKENS = {
    "alice-token": ALICE,
    "bob-token": BOB,
    "admin-token": ADMIN,
}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


ALICE_HEADERS = bearer("alice-token")
BOB_HEADERS = bearer("bob-token")
ADMIN_HEADERS = bearer("admin-token")


class FakeAuthClient:
    """Resolves a fixed set of tokens without the network."""

    async def get_user(self, token: str) -> CurrentUser:
        try:
            return TOKENS[token]
        except KeyError:
            raise AuthenticationError("Unauthenticated.")


class RecordingPublisher:
    """Collects published events instead of talking to RabbitMQ."""

    def __init__(self):
        self.events = []

    def publish_order_created(self, order_data):
        self.events.append(("OrderCreated", order_data))
        return True

    def publish_order_status_changed(self, order_data):
        self.events.append(("OrderStatusChanged", order_data))
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(session_factory, publisher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_client] = lambda: FakeAuthClient()
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    """Factory inserting a product; keyword arguments override defaults."""

    def _make(**overrides):
        fields = {
            "name": "Smart Feeder",
            "description": "Automatic feeder",
            "price": 50,
            "stock_quantity": 10,
            "tier": "automated",
            "category": "feeders",
            "images": [],
            "features": ["schedule"],
            "points_required": 0,
            "discount_percentage": 0,
        }
        fields.update(overrides)
        product = Product(**fields)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make
