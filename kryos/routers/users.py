from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kryos.database import get_db
from kryos.schemas.requests import RegisterUserRequest, UpdateProfileRequest
from kryos.schemas.responses import UserResponse
from kryos.services import users

router = APIRouter()


@router.post("", response_model=UserResponse)
def register_user(request: RegisterUserRequest, db: Session = Depends(get_db)):
    """Create or refresh the profile for an identity-provider account."""
    user = users.register_user(
        db, request.id, request.email, request.display_name
    )
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return UserResponse.model_validate(users.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
def update_profile(user_id: str, request: UpdateProfileRequest, db: Session = Depends(get_db)):
    user = users.update_profile(
        db, user_id, email=request.email, display_name=request.display_name
    )
    return UserResponse.model_validate(user)
