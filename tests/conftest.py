"""
Shared pytest fixtures for all test modules.

Uses an in-memory SQLite database (StaticPool) so every test
function gets a clean, isolated database. The payment gateway is replaced by
a fake and media goes to a per-test temporary directory.
"""
import pytest
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kryos import models
from kryos.config import get_settings
from kryos.database import Base, get_db
from kryos.dependencies import get_gateway, get_media_store
from kryos.domain import TransactionRecord, TransactionStatus
from kryos.media_store import LocalMediaStore
from kryos.repository import SqlTransactionRepository
from kryos.services.signature import compute_signature


# ---------------------------------------------------------------------------
# StaticPool forces all SQLAlchemy connections to reuse the same underlying
# sqlite3 connection, which is required for in-memory SQLite.
# ---------------------------------------------------------------------------
TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=TEST_ENGINE)

SECRET = get_settings().GATEWAY_KEY_SECRET


@pytest.fixture(autouse=True)
def reset_db():
    """Drop and recreate all tables before each test for full isolation."""
    Base.metadata.drop_all(bind=TEST_ENGINE)
    Base.metadata.create_all(bind=TEST_ENGINE)
    yield
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def db(reset_db):
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db):
    return SqlTransactionRepository(db)


@pytest.fixture
def gateway():
    fake = MagicMock()
    fake.key_id = "rzp_test_key"
    fake.gateway_name = "razorpay"
    fake.create_order.side_effect = lambda payload: {
        "id": "order_test_1",
        "entity": "order",
        "amount": payload["amount"],
        "currency": payload["currency"],
        "receipt": payload["receipt"],
        "status": "created",
    }
    return fake


@pytest.fixture
def media_store(tmp_path):
    return LocalMediaStore(str(tmp_path / "media"), "http://cdn.test/media")


@pytest.fixture
def client(db, gateway, media_store):
    """
    TestClient with the DB, gateway and media store dependencies overridden.
    Not used as a context manager, so the lifespan hook is skipped.
    """
    from kryos.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_media_store] = lambda: media_store
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers, not fixtures, so any test file can import and call them directly.
# ---------------------------------------------------------------------------
def sign(order_id: str, payment_id: str, secret: str = SECRET) -> str:
    return compute_signature(order_id, payment_id, secret)


def make_user(db, user_id: str, role: str = "user", email: Optional[str] = None) -> models.User:
    user = models.User(id=user_id, email=email or f"{user_id}@example.com", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_record(
    repo,
    user_id: str = "user_1",
    status: TransactionStatus = TransactionStatus.PENDING,
    amount: float = 500.0,
    verified: bool = True,
    created_at: Optional[datetime] = None,
    txn_id: Optional[str] = None,
) -> TransactionRecord:
    if created_at is None:
        created_at = datetime.now(timezone.utc) - timedelta(hours=1)
    order_id, payment_id = f"order_{user_id}", f"pay_{user_id}"
    extra = {"id": txn_id} if txn_id else {}
    record = TransactionRecord(
        user_id=user_id,
        amount=amount,
        receiver="Acme Supplies",
        status=status,
        gateway_order_id=order_id,
        gateway_payment_id=payment_id if verified else None,
        gateway_signature=sign(order_id, payment_id) if verified else None,
        signature_verified=verified,
        failure_reason=None if verified else "Payment cancelled by user",
        created_at=created_at,
        updated_at=created_at,
        **extra,
    )
    return repo.put(record)
