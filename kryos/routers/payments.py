from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from kryos.config import Settings, get_settings
from kryos.database import get_db
from kryos.dependencies import get_gateway, get_transaction_repo
from kryos.domain import TransactionStatus
from kryos.processors.base import BaseGateway
from kryos.repository import TransactionRepository
from kryos.schemas.requests import (
    CreateOrderRequest,
    FailedPaymentRequest,
    SubmitPaymentRequest,
    VerifyPaymentRequest,
)
from kryos.schemas.responses import (
    CreateOrderResponse,
    RecordedPaymentResponse,
    TransactionListResponse,
    TransactionResponse,
    VerifyPaymentResponse,
)
from kryos.services import orders, query, recorder
from kryos.services.users import role_of

router = APIRouter()


@router.post("/create-order", response_model=CreateOrderResponse)
def create_order(
    request: CreateOrderRequest,
    db: Session = Depends(get_db),
    gateway: BaseGateway = Depends(get_gateway),
):
    """
    Create a gateway order for checkout.

    - amount is in major units and must be positive
    - non-admin callers are held to the payment ceiling
    - returns the gateway order and the public key id for the checkout widget
    """
    result = orders.create_order(
        gateway,
        amount=request.amount,
        currency=request.currency,
        receipt=request.receipt,
        notes=request.notes,
        role=role_of(db, request.user_id),
    )
    return CreateOrderResponse(order=result["order"], key_id=result["key_id"])


@router.post("/verify", response_model=VerifyPaymentResponse)
def verify_payment(
    request: VerifyPaymentRequest,
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings: Settings = Depends(get_settings),
):
    """
    Verify a checkout success callback and record the transaction.

    A signature mismatch is not an error: it is recorded as failed and
    reported with verified=false.
    """
    record = recorder.record_verified_payment(
        repo, request, request.order_details, request.user_id, settings.GATEWAY_KEY_SECRET
    )
    return VerifyPaymentResponse(
        verified=record.signature_verified,
        transaction_id=record.id,
        status=record.status.value,
        message=(
            "Payment verified successfully" if record.signature_verified
            else "Payment verification failed"
        ),
    )


@router.post("/failed", response_model=RecordedPaymentResponse)
def record_failed_payment(
    request: FailedPaymentRequest,
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    record = recorder.record_failed_payment(
        repo, request.order_id, request.order_details, request.user_id, request.failure_reason
    )
    return RecordedPaymentResponse(
        transaction_id=record.id,
        status=record.status.value,
        message="Failed transaction recorded successfully",
    )


@router.post("/submit", response_model=RecordedPaymentResponse)
def submit_payment(
    request: SubmitPaymentRequest,
    db: Session = Depends(get_db),
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings: Settings = Depends(get_settings),
):
    """Record a payment through the admin-approval workflow."""
    record = recorder.submit_payment(
        repo,
        request,
        request.order_details,
        request.user_id,
        role_of(db, request.user_id),
        settings.GATEWAY_KEY_SECRET,
    )
    needs_approval = record.status is TransactionStatus.PENDING
    if needs_approval:
        message = "Payment submitted for admin approval."
    elif record.status is TransactionStatus.COMPLETED:
        message = "Payment processed successfully!"
    else:
        message = "Payment verification failed"
    return RecordedPaymentResponse(
        transaction_id=record.id,
        status=record.status.value,
        message=message,
        needs_approval=needs_approval,
    )


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    user_id: str = Query(None),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    records, total = query.list_user_transactions(repo, user_id)
    return TransactionListResponse(
        transactions=[TransactionResponse.from_record(r) for r in records],
        total=total,
    )


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    return TransactionResponse.from_record(query.get_transaction(repo, transaction_id))
