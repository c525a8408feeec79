from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from kryos import models, policy
from kryos.database import get_db
from kryos.dependencies import get_transaction_repo, require_admin
from kryos.repository import TransactionRepository
from kryos.schemas.responses import (
    AdminTransactionListResponse,
    AdminTransactionResponse,
    BulkApproveResponse,
    StatsResponse,
    UserListResponse,
    UserResponse,
)
from kryos.services import approval, query
from kryos.schemas.requests import SetRoleRequest
from kryos.services.users import list_users, set_role

router = APIRouter()


@router.get("/transactions", response_model=AdminTransactionListResponse)
def list_all_transactions(
    status: Optional[str] = Query(None, description="pending/approved/rejected or completed/failed"),
    admin: models.User = Depends(require_admin),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    records = query.list_all_transactions(repo, status)
    return AdminTransactionListResponse(
        transactions=[AdminTransactionResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.post("/transactions/bulk-approve", response_model=BulkApproveResponse)
def bulk_approve(
    admin: models.User = Depends(require_admin),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    approved = approval.bulk_approve(repo)
    if approved:
        message = f"{len(approved)} transactions have been approved."
    else:
        message = "There are no pending transactions to approve."
    return BulkApproveResponse(
        approved=len(approved),
        transaction_ids=[r.id for r in approved],
        message=message,
    )


@router.post("/transactions/{transaction_id}/approve", response_model=AdminTransactionResponse)
def approve_transaction(
    transaction_id: str,
    admin: models.User = Depends(require_admin),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    return AdminTransactionResponse.from_record(approval.approve(repo, transaction_id))


@router.post("/transactions/{transaction_id}/reject", response_model=AdminTransactionResponse)
def reject_transaction(
    transaction_id: str,
    admin: models.User = Depends(require_admin),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    return AdminTransactionResponse.from_record(approval.reject(repo, transaction_id))


@router.get("/stats", response_model=StatsResponse)
def stats(
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    users = list_users(db)
    return StatsResponse(
        **approval.transaction_stats(repo),
        total_users=len(users),
        admin_users=sum(1 for u in users if policy.normalize_role(u.role) == policy.ADMIN),
    )


@router.get("/users", response_model=UserListResponse)
def all_users(
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users = list_users(db)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.post("/users/{target_id}/role", response_model=UserResponse)
def change_role(
    target_id: str,
    request: SetRoleRequest,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Promote or demote a user. Registration never grants admin."""
    return UserResponse.model_validate(set_role(db, target_id, request.role))
