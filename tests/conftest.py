"""
Shared test setup: in-memory database, API client and auth helpers
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ.pop("NOTIFICATION_TIMEOUT_SECONDS", None)

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.auth_handler import AuthHandler
from app.database import Base, get_db
from app.models.user import User
from app.services.notification_service import SlackNotifier, get_notifier
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)

@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

class SlackRecorder:
    """Captures webhook requests sent through an httpx mock transport"""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ok")

    def notifier(self, webhook_url: str = "https://hooks.slack.test/services/T000/B000/XXX") -> SlackNotifier:
        return SlackNotifier(webhook_url=webhook_url, timeout_seconds=10, transport=httpx.MockTransport(self))

@pytest.fixture
def slack():
    recorder = SlackRecorder()
    notifier = recorder.notifier()
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)

def create_user(username: str, password: str, role: str = "staff", is_active: bool = True) -> None:
    db = TestingSessionLocal()
    try:
        db.add(User(
            username=username,
            hashed_password=AuthHandler().get_password_hash(password),
            full_name=username.title(),
            role=role,
            is_active=is_active,
        ))
        db.commit()
    finally:
        db.close()

def auth_headers_for(username: str, password: str, role: str) -> dict:
    create_user(username, password, role)
    response = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}

@pytest.fixture
def admin_headers():
    return auth_headers_for("admin", "AdminPass123", "admin")

@pytest.fixture
def staff_headers():
    return auth_headers_for("clerk", "ClerkPass123", "staff")

def order_payload(**overrides) -> dict:
    """Valid order body; items default to the two-line sample order"""
    payload = {
        "order_date": "2026-10-19",
        "customer_name": "Nguyen Van An",
        "customer_address": "12 Le Loi, District 1, Ho Chi Minh City",
        "customer_phone": "0901234567",
        "customer_email": "an.nguyen@example.com",
        "billing_tax_number": "0312345678",
        "items": [
            {"product_id": 1, "product_name": "A", "quantity": 2, "unit_price": 100, "total": 200},
            {"product_id": 2, "product_name": "B", "quantity": 1, "unit_price": 50, "total": 50},
        ],
        "subtotal": 250,
    }
    payload.update(overrides)
    return payload

def submit_order(**overrides) -> dict:
    response = client.post("/api/v1/orders/", json=order_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()
