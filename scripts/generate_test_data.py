"""
Seeds the database with demo users and transactions for local development.

Distribution:
- 1 admin, 8 regular users
- ~60 transactions: 55% completed, 25% failed, 20% pending approval
- Every completed or pending record carries a valid gateway signature
- Failed records are split between signature mismatches and cancellations
"""
import sys
import os
import random
from datetime import datetime, timedelta, timezone

# Allow running from project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kryos.config import get_settings
from kryos.database import engine, SessionLocal
from kryos import models
from kryos.domain import TransactionRecord, TransactionStatus, generate_transaction_id
from kryos.repository import SqlTransactionRepository
from kryos.services.signature import compute_signature

random.seed(42)

RECEIVERS = ["Acme Supplies", "City Utilities", "Northwind Traders", "Blue Lake Rentals"]
OUTCOMES = (
    [TransactionStatus.COMPLETED] * 55 +
    [TransactionStatus.FAILED] * 25 +
    [TransactionStatus.PENDING] * 20
)

BASE_TIME = datetime(2026, 1, 15, 8, 0, 0, tzinfo=timezone.utc)


def make_users():
    users = [models.User(id="admin_001", email="admin@kryos.dev", display_name="Kryos Admin", role="admin")]
    for i in range(1, 9):
        users.append(models.User(
            id=f"user_{i:03d}",
            email=f"user{i}@example.com",
            display_name=f"Demo User {i}",
            role="user",
        ))
    return users


def make_transaction(user_id, outcome, created_at, secret):
    order_id = f"order_{random.randint(10**9, 10**10)}"
    payment_id = f"pay_{random.randint(10**9, 10**10)}"
    amount = round(random.uniform(100, 50000), 2)
    common = dict(
        id=generate_transaction_id(),
        user_id=user_id,
        amount=amount,
        receiver=random.choice(RECEIVERS),
        description=random.choice(["", "Invoice payment", "Monthly rent", "Subscription"]),
        gateway_order_id=order_id,
        created_at=created_at,
        updated_at=created_at,
    )

    if outcome is TransactionStatus.FAILED:
        if random.random() < 0.5:
            return TransactionRecord(status=outcome, failure_reason="Payment cancelled by user", **common)
        return TransactionRecord(
            status=outcome,
            gateway_payment_id=payment_id,
            gateway_signature="0" * 64,
            signature_verified=False,
            failure_reason="Signature verification failed",
            **common,
        )

    return TransactionRecord(
        status=outcome,
        gateway_payment_id=payment_id,
        gateway_signature=compute_signature(order_id, payment_id, secret),
        signature_verified=True,
        **common,
    )


def main():
    print("Creating database tables...")
    models.Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing = db.query(models.Transaction).count()
        if existing > 0:
            print(f"Database already has {existing} transactions. Skipping seed.")
            return

        users = make_users()
        db.add_all(users)
        db.commit()

        secret = get_settings().GATEWAY_KEY_SECRET
        repo = SqlTransactionRepository(db)
        regular = [u.id for u in users if u.role == "user"]
        for i in range(60):
            outcome = random.choice(OUTCOMES)
            created_at = BASE_TIME + timedelta(hours=random.uniform(0, 72))
            repo.put(make_transaction(random.choice(regular), outcome, created_at, secret))

        print(f"Seeded {len(users)} users and {db.query(models.Transaction).count()} transactions.")

        from sqlalchemy import func as sqlfunc
        states = db.query(
            models.Transaction.status,
            sqlfunc.count(models.Transaction.id)
        ).group_by(models.Transaction.status).all()
        print("\nStatus distribution:")
        for state, cnt in states:
            print(f"  {state}: {cnt}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
