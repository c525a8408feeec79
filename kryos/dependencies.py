from fastapi import Depends, Query
from sqlalchemy.orm import Session

from kryos import models, policy
from kryos.config import Settings, get_settings
from kryos.database import get_db
from kryos.errors import PermissionDeniedError
from kryos.media_store import BaseMediaStore, LocalMediaStore
from kryos.processors.base import BaseGateway
from kryos.processors.razorpay import RazorpayGateway
from kryos.repository import (
    JsonSnapshotTransactionRepository,
    SqlTransactionRepository,
    TransactionRepository,
)
from kryos.services.users import find_user


def get_transaction_repo(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TransactionRepository:
    if settings.TRANSACTION_STORE == "json":
        return JsonSnapshotTransactionRepository(settings.TRANSACTION_SNAPSHOT_PATH)
    return SqlTransactionRepository(db)


def get_gateway(settings: Settings = Depends(get_settings)) -> BaseGateway:
    return RazorpayGateway(
        key_id=settings.GATEWAY_KEY_ID,
        key_secret=settings.GATEWAY_KEY_SECRET,
        base_url=settings.GATEWAY_BASE_URL,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


def get_media_store(settings: Settings = Depends(get_settings)) -> BaseMediaStore:
    return LocalMediaStore(settings.MEDIA_ROOT, settings.MEDIA_BASE_URL)


def require_admin(
    user_id: str = Query(..., description="Caller's identity provider uid"),
    db: Session = Depends(get_db),
) -> models.User:
    """Caller must be a known user whose role may approve transactions."""
    user = find_user(db, user_id)
    if user is None or not policy.can_approve_transactions(user.role):
        raise PermissionDeniedError("Admin privileges required")
    return user
