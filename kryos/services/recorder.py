"""
Transaction recording.

Every gateway callback (success, failure or cancellation) produces exactly one
new record keyed by a freshly generated id. A signature mismatch is a normal
outcome recorded as failed, never an exception.

Status on creation:
  verified callback               -> completed
  verified, held for approval     -> pending   (non-admin submissions)
  signature mismatch              -> failed    ("Signature verification failed")
  cancellation / checkout error   -> failed    (caller's reason or default)
"""
import logging
from typing import Optional

from kryos import policy
from kryos.domain import TransactionRecord, TransactionStatus
from kryos.errors import InputValidationError, PermissionDeniedError
from kryos.repository import TransactionRepository
from kryos.schemas.requests import GatewayCallback, OrderDetails
from kryos.services.signature import verify_signature

logger = logging.getLogger(__name__)

SIGNATURE_FAILURE_REASON = "Signature verification failed"
DEFAULT_CANCEL_REASON = "Payment cancelled by user"


def _build_record(
    callback: GatewayCallback,
    order_details: OrderDetails,
    user_id: str,
    verified: bool,
    hold_for_approval: bool = False,
) -> TransactionRecord:
    if not verified:
        status = TransactionStatus.FAILED
    elif hold_for_approval:
        status = TransactionStatus.PENDING
    else:
        status = TransactionStatus.COMPLETED

    return TransactionRecord(
        user_id=user_id,
        amount=order_details.amount,
        currency=order_details.currency or "INR",
        receiver=order_details.receiver,
        description=order_details.description or "",
        status=status,
        gateway_order_id=callback.order_id,
        gateway_payment_id=callback.payment_id,
        gateway_signature=callback.signature,
        signature_verified=verified,
        failure_reason=None if verified else SIGNATURE_FAILURE_REASON,
    )


def _require_user(user_id: Optional[str]) -> None:
    if not user_id:
        raise InputValidationError("user_id is required")


def record_verified_payment(
    repo: TransactionRepository,
    callback: GatewayCallback,
    order_details: OrderDetails,
    user_id: str,
    secret: str,
) -> TransactionRecord:
    """
    Verify a checkout success callback and persist the outcome.

    Raises:
        InputValidationError: missing callback fields or user_id
        PersistenceError: storage unavailable (not retried)
    """
    _require_user(user_id)
    verified = verify_signature(callback.order_id, callback.payment_id, callback.signature, secret)

    record = repo.put(_build_record(callback, order_details, user_id, verified))
    logger.info(
        "Payment recorded",
        extra={"transaction_id": record.id, "order_id": callback.order_id,
               "status": record.status.value, "signature_verified": verified},
    )
    return record


def record_failed_payment(
    repo: TransactionRepository,
    order_id: str,
    order_details: OrderDetails,
    user_id: str,
    failure_reason: Optional[str] = None,
) -> TransactionRecord:
    """Persist a cancelled or failed checkout that never produced a payment id."""
    if not order_id:
        raise InputValidationError("Missing required parameters", detail="order_id is required")
    _require_user(user_id)

    record = repo.put(TransactionRecord(
        user_id=user_id,
        amount=order_details.amount,
        currency=order_details.currency or "INR",
        receiver=order_details.receiver,
        description=order_details.description or "",
        status=TransactionStatus.FAILED,
        gateway_order_id=order_id,
        signature_verified=False,
        failure_reason=(failure_reason or "").strip() or DEFAULT_CANCEL_REASON,
    ))
    logger.info(
        "Failed payment recorded",
        extra={"transaction_id": record.id, "order_id": order_id,
               "failure_reason": record.failure_reason},
    )
    return record


def submit_payment(
    repo: TransactionRepository,
    callback: GatewayCallback,
    order_details: OrderDetails,
    user_id: str,
    role: Optional[str],
    secret: str,
) -> TransactionRecord:
    """
    Record a payment through the approval workflow.

    Admin payments complete immediately; other users' verified payments wait
    as pending until an admin approves or rejects them.
    """
    _require_user(user_id)
    if policy.exceeds_ceiling(role, order_details.amount):
        ceiling = policy.max_payment_amount(role)
        raise PermissionDeniedError(
            f"Payment amount cannot exceed {ceiling:,.0f} for regular users"
        )

    verified = verify_signature(callback.order_id, callback.payment_id, callback.signature, secret)
    record = repo.put(_build_record(
        callback, order_details, user_id, verified,
        hold_for_approval=policy.requires_approval(role),
    ))
    logger.info(
        "Payment submitted",
        extra={"transaction_id": record.id, "status": record.status.value,
               "needs_approval": record.status is TransactionStatus.PENDING},
    )
    return record
