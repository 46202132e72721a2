import os

# Point the application at an in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_api.main import app
from inventory_api.database import Base, get_db
from inventory_api.utils.cache import get_cache
from inventory_api.utils.security import PasswordHasher, get_password_hasher


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependencies
app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_cache] = lambda: None
app.dependency_overrides[get_password_hasher] = lambda: PasswordHasher(rounds=4)


@pytest.fixture(autouse=True)
def level_check():
    """Keep stock writes from publishing Celery tasks."""
    with patch("inventory_api.api.stocks.check_stock_levels.delay") as delay:
        yield delay


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def product_payload(**overrides):
    payload = {
        "article_number": "ART00001",
        "name": "Pallet jack",
        "description": "Manual pallet jack, 2500 kg",
        "category": "Equipment",
        "manufacturer": "Liftmaster",
        "purchase_price": 250.0,
        "selling_price": 399.99,
        "min_stock_level": 5,
        "max_stock_level": 50,
    }
    payload.update(overrides)
    return payload


def warehouse_payload(**overrides):
    payload = {
        "name": "Central",
        "address": "12 Harbour Road, Gdansk",
        "contact_person": "Anna Nowak",
        "phone": "+48123456789",
        "email": "central@acme-logistics.pl",
        "capacity": 1000,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_product(client):
    """Factory creating a product through the API and returning its JSON."""
    def _create(**overrides):
        response = client.post("/api/products", json=product_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()
    return _create


@pytest.fixture
def create_warehouse(client):
    """Factory creating a warehouse through the API and returning its JSON."""
    def _create(**overrides):
        response = client.post("/api/warehouses", json=warehouse_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()
    return _create


@pytest.fixture
def create_stock(client):
    """Factory creating a stock record through the API and returning its JSON."""
    def _create(product_id, warehouse_id, current_quantity=10, reserved_quantity=0, location="A-01"):
        response = client.post(
            "/api/warehouse-stocks",
            json={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "current_quantity": current_quantity,
                "reserved_quantity": reserved_quantity,
                "location": location,
            },
        )
        assert response.status_code == 201, response.json()
        return response.json()
    return _create


@pytest.fixture
def product_data():
    """Builder for product request bodies."""
    return product_payload


@pytest.fixture
def warehouse_data():
    """Builder for warehouse request bodies."""
    return warehouse_payload


@pytest.fixture
def session_factory():
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
