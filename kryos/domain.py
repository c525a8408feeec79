"""
Transaction record and status vocabulary.

One canonical status enum is used everywhere: pending / completed / failed.
The admin approval vocabulary maps onto it (approved -> completed,
rejected -> failed), as do the gateway-style words a client may send.

Invariants held by TransactionRecord:
  - status == completed only if signature_verified
  - once persisted, only status and updated_at may change
"""
import math
import time
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from kryos.errors import ImmutableFieldError, InputValidationError


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


STATUS_ALIASES = {
    # canonical
    "pending": TransactionStatus.PENDING,
    "completed": TransactionStatus.COMPLETED,
    "failed": TransactionStatus.FAILED,
    # admin approval vocabulary
    "approved": TransactionStatus.COMPLETED,
    "rejected": TransactionStatus.FAILED,
    # gateway vocabulary
    "created": TransactionStatus.PENDING,
    "captured": TransactionStatus.COMPLETED,
    "success": TransactionStatus.COMPLETED,
    "cancelled": TransactionStatus.FAILED,
}

ADMIN_LABELS = {
    TransactionStatus.PENDING: "pending",
    TransactionStatus.COMPLETED: "approved",
    TransactionStatus.FAILED: "rejected",
}

# Set at creation and never rewritten afterwards.
MUTABLE_FIELDS = frozenset({"status", "updated_at"})


def normalize_status(value) -> TransactionStatus:
    if isinstance(value, TransactionStatus):
        return value
    status = STATUS_ALIASES.get(str(value).strip().lower())
    if status is None:
        raise InputValidationError(f"Unknown transaction status: {value!r}")
    return status


def generate_transaction_id() -> str:
    return f"txn_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything stored is UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TransactionRecord:
    user_id: str
    amount: float
    receiver: str
    status: TransactionStatus
    currency: str = "INR"
    description: str = ""
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    gateway_signature: Optional[str] = None
    signature_verified: bool = False
    failure_reason: Optional[str] = None
    id: str = field(default_factory=generate_transaction_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        object.__setattr__(self, "status", normalize_status(self.status))
        object.__setattr__(self, "created_at", as_utc(self.created_at))
        object.__setattr__(self, "updated_at", as_utc(self.updated_at))
        if not self.user_id:
            raise InputValidationError("user_id is required")
        if not self.receiver:
            raise InputValidationError("receiver is required")
        if self.amount is None or not math.isfinite(self.amount) or self.amount <= 0:
            raise InputValidationError("amount must be positive")
        if self.status is TransactionStatus.COMPLETED and not self.signature_verified:
            raise InputValidationError(
                "A transaction cannot be completed without a verified signature"
            )

    def with_status(self, status) -> "TransactionRecord":
        return replace(self, status=normalize_status(status), updated_at=utcnow())

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["status"] = self.status.value
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        values = {f.name: data.get(f.name) for f in fields(cls) if f.name in data}
        for key in ("created_at", "updated_at"):
            if isinstance(values.get(key), str):
                values[key] = datetime.fromisoformat(values[key])
        return cls(**values)


def check_immutable(existing: TransactionRecord, updated: TransactionRecord) -> None:
    """Raise if `updated` rewrites anything other than status/updated_at."""
    changed = [
        f.name for f in fields(TransactionRecord)
        if f.name not in MUTABLE_FIELDS
        and getattr(existing, f.name) != getattr(updated, f.name)
    ]
    if changed:
        raise ImmutableFieldError(
            f"Transaction {existing.id} is already persisted",
            detail=f"Immutable fields changed: {', '.join(sorted(changed))}",
        )
