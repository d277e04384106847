from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from bloodbank.core.config import Settings, get_settings
from bloodbank.core.exceptions import BadRequestError
from bloodbank.database.database import get_db
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.user import UserCreate, UserResponse, UserEnvelope
from bloodbank.api.endpoints.auth import register_user, require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.SUPERVISOR, UserRole.STAFF))
):
    """List users, optionally filtered by role."""
    query = db.query(User)
    if role:
        try:
            query = query.filter(User.role == UserRole(role))
        except ValueError:
            raise BadRequestError(f"Unknown role '{role}'")
    users = query.order_by(User.created_at.desc()).all()
    return [UserResponse.model_validate(user) for user in users]

@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Create a user of any role, including staff, supervisors and admins (Admin only)."""
    if user_data.role is None:
        raise BadRequestError("A role is required")

    user = register_user(db, user_data, user_data.role, settings)
    logger.info(f"User {user.email} ({user.role.value}) created by admin {current_user.email}")
    return UserEnvelope(msg="User created successfully", user=UserResponse.model_validate(user))
