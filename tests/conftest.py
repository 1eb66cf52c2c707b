import os
import pathlib
import sys
import tempfile

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before core.database builds the engine
os.environ["DATABASE_URL"] = f"sqlite:///{pathlib.Path(tempfile.gettempdir()) / 'brew_manager_test.db'}"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

ADMIN_EMAIL = "admin@brew.local"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(autouse=True)
def clean_db():
    """Reset database before each test and re-seed the bootstrap admin."""
    from core.database import Base, engine, init_db

    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def client():
    from main import app

    return TestClient(app)


@pytest.fixture
def db_session():
    from core.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def login(client, email, password):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def cashier_headers(client, admin_headers):
    resp = client.post(
        "/auth/register",
        json={"name": "Kasir", "email": "kasir@brew.local", "password": "kasir123", "role": "cashier"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return login(client, "kasir@brew.local", "kasir123")


def create_material(client, headers, name="Coffee beans", unit="g", stock=1000, unit_cost=1000):
    resp = client.post(
        "/raw-materials",
        json={"name": name, "unit": unit, "stock": stock, "unit_cost": unit_cost, "supplier": "Toko Biji"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def product_payload(name="Kopi Susu", ingredients=(), manual_cost=False, cost_price=0, stock=50, price=25000):
    return {
        "name": name,
        "category": "Coffee",
        "price": price,
        "cost_price": cost_price,
        "manual_cost": manual_cost,
        "stock": stock,
        "image": None,
        "ingredients": [{"raw_material_id": mid, "amount": amount} for mid, amount in ingredients],
    }