from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from bloodbank.database.database import get_db
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.user import ProfileUpdate, EligibilityUpdate, UserResponse, UserEnvelope
from bloodbank.services.eligibility_service import apply_eligibility_update
from bloodbank.api.endpoints.auth import get_current_user, require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/me", response_model=UserResponse)
async def read_profile(current_user: User = Depends(get_current_user)):
    """Get the caller's own profile."""
    return UserResponse.model_validate(current_user)

@router.put("/me", response_model=UserEnvelope)
async def update_profile(
    profile_update: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update name, contact number and address. Empty values are ignored."""
    if profile_update.first_name:
        current_user.first_name = profile_update.first_name.strip()
    if profile_update.last_name:
        current_user.last_name = profile_update.last_name.strip()
    if profile_update.contact_number:
        current_user.contact_number = profile_update.contact_number.strip()
    if profile_update.address:
        address = {
            key: value.strip()
            for key, value in profile_update.address.model_dump(by_alias=True).items()
            if value
        }
        # the profile form always submits the whole address
        current_user.address = address

    db.commit()
    db.refresh(current_user)

    logger.info(f"Profile updated: {current_user.email}")
    return UserEnvelope(msg="Profile updated successfully", user=UserResponse.model_validate(current_user))

@router.put("/eligibility", response_model=UserEnvelope)
async def update_eligibility(
    eligibility: EligibilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.DONOR))
):
    """Submit blood type, last donation date and medical history for screening."""
    medical_history = None
    if eligibility.medical_history is not None:
        medical_history = eligibility.medical_history.model_dump(by_alias=True)

    apply_eligibility_update(
        current_user,
        blood_type=eligibility.blood_type,
        last_donation_date=eligibility.last_donation_date,
        medical_history=medical_history,
    )
    db.commit()
    db.refresh(current_user)

    return UserEnvelope(msg="Eligibility updated successfully", user=UserResponse.model_validate(current_user))
