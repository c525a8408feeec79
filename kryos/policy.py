"""
Role policy shared by every route that behaves differently for admins.
"""
from typing import Optional

from kryos.config import get_settings

ADMIN = "admin"
USER = "user"

ROLE_PERMISSIONS = {
    ADMIN: {"transactions:approve", "payments:unlimited"},
    USER: set(),
}


def normalize_role(role: Optional[str]) -> str:
    """Unknown or missing roles get the least-privileged role."""
    role = (role or "").strip().lower()
    return role if role in ROLE_PERMISSIONS else USER


def has_permission(role: Optional[str], permission: str) -> bool:
    return permission in ROLE_PERMISSIONS[normalize_role(role)]


def can_approve_transactions(role: Optional[str]) -> bool:
    return has_permission(role, "transactions:approve")


def max_payment_amount(role: Optional[str]) -> Optional[float]:
    """Payment ceiling in major units; None means unlimited."""
    if has_permission(role, "payments:unlimited"):
        return None
    return get_settings().USER_MAX_PAYMENT_AMOUNT


def requires_approval(role: Optional[str]) -> bool:
    return not can_approve_transactions(role)


def exceeds_ceiling(role: Optional[str], amount: float) -> bool:
    ceiling = max_payment_amount(role)
    return ceiling is not None and amount > ceiling
