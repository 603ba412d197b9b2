"""
Shared test fixtures — SQLite test database, test client, auth helpers,
and sample project payloads.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set JWT_SECRET before importing app modules
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from estimator.database import Base, get_db
from estimator.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(client):
    """Register a test user and return auth headers."""
    response = client.post("/api/auth/register", json={
        "email": "test@contractor.com",
        "password": "strongpassword123",
    })
    assert response.status_code == 200
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(client):
    """A second user, for ownership checks."""
    response = client.post("/api/auth/register", json={
        "email": "other@contractor.com",
        "password": "anotherpassword456",
    })
    assert response.status_code == 200
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


# --- Sample payloads ---

def sample_customer_info(**overrides):
    info = {
        "firstName": "Dana",
        "lastName": "Reyes",
        "street": "123 Main St",
        "city": "Chicago",
        "state": "IL",
        "zipCode": "60601",
        "phone": "(312) 555-0199",
        "email": "Dana.Reyes@Example.com",
        "projectName": "Kitchen refresh",
        "startDate": "2026-04-01",
    }
    info.update(overrides)
    return info


def sample_work_item(**overrides):
    """100 sq ft of kitchen flooring at $2 + $3 per sq ft."""
    item = {
        "type": "kitchen-flooring",
        "name": "Floor tile",
        "materialCost": 2,
        "laborCost": 3,
        "measurementType": "sqft",
        "surfaces": [{"measurementType": "sqft", "sqft": 100}],
    }
    item.update(overrides)
    return item


def sample_payload(work_items=None, settings=None, categories=None):
    if categories is None:
        categories = [{
            "key": "kitchen",
            "name": "Kitchen",
            "workItems": work_items if work_items is not None else [sample_work_item()],
        }]
    return {
        "customerInfo": sample_customer_info(),
        "categories": categories,
        "settings": settings if settings is not None else {"taxRate": 0.08},
    }
