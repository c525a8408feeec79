"""
User profiles synced from the identity provider.

The provider's uid is the join key for all per-user data. Role is stored here
and read by the policy functions; there is no session or token handling.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kryos import models, policy
from kryos.errors import InputValidationError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def _commit(db: Session, user: models.User) -> models.User:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to save user", detail=str(e))
    db.refresh(user)
    return user


def find_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user(db: Session, user_id: str) -> models.User:
    user = find_user(db, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def role_of(db: Session, user_id: Optional[str]) -> str:
    """Role for user_id; unknown users get the default role."""
    user = find_user(db, user_id) if user_id else None
    return policy.normalize_role(user.role if user else None)


def register_user(
    db: Session,
    user_id: str,
    email: str,
    display_name: Optional[str] = None,
) -> models.User:
    """
    Create the profile on first sign-in, or refresh email/display name.

    New accounts always get the user role; only set_role promotes.
    """
    user = find_user(db, user_id)
    if user is None:
        user = models.User(
            id=user_id,
            email=email,
            display_name=display_name,
            role=policy.USER,
        )
        db.add(user)
        logger.info("User registered", extra={"user_id": user_id, "role": user.role})
    else:
        user.email = email
        if display_name is not None:
            user.display_name = display_name
    return _commit(db, user)


def update_profile(
    db: Session,
    user_id: str,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
) -> models.User:
    user = get_user(db, user_id)
    if email is not None:
        user.email = email
    if display_name is not None:
        user.display_name = display_name
    user.profile_updated_at = datetime.now(timezone.utc)
    logger.info("Profile updated", extra={"user_id": user_id})
    return _commit(db, user)


def set_role(db: Session, user_id: str, role: str) -> models.User:
    """Change a user's role. Callers must already be authorised as admin."""
    normalized = (role or "").strip().lower()
    if normalized not in policy.ROLE_PERMISSIONS:
        raise InputValidationError(f"Unknown role: {role!r}")
    user = get_user(db, user_id)
    user.role = normalized
    logger.info("Role changed", extra={"user_id": user_id, "role": normalized})
    return _commit(db, user)


def list_users(db: Session) -> List[models.User]:
    try:
        return db.query(models.User).order_by(models.User.created_at.desc()).all()
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to fetch users", detail=str(e))
