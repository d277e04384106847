"""
Donor eligibility screening.

A donor is Deferred when any deferral flag is set in their medical history or
when fewer than 56 whole days have passed since their last donation;
otherwise Eligible.
"""
import logging
from datetime import datetime
from typing import Optional

from bloodbank.core.exceptions import ForbiddenError
from bloodbank.models.user import User, UserRole, EligibilityStatus
from bloodbank.services.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

MIN_DAYS_BETWEEN_DONATIONS = 56
DEFERRAL_FLAGS = ("hasChronicIllness", "recentTravelToRiskArea", "recentSurgery")
HISTORY_FLAGS = DEFERRAL_FLAGS + ("onMedication",)


def normalize_medical_history(medical_history: dict) -> dict:
    """Fill in missing flags with False and notes with an empty string."""
    history = {flag: bool(medical_history.get(flag) or False) for flag in HISTORY_FLAGS}
    history["notes"] = (medical_history.get("notes") or "").strip()
    return history


def days_since(moment: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed between moment and now, rounded down."""
    elapsed = as_utc(now or utcnow()) - as_utc(moment)
    return elapsed.days


def evaluate_eligibility(
    medical_history: dict,
    last_donation_date: Optional[datetime],
    now: Optional[datetime] = None
) -> EligibilityStatus:
    """Compute eligibility from medical-history flags and the last donation date."""
    if any(medical_history.get(flag) for flag in DEFERRAL_FLAGS):
        return EligibilityStatus.DEFERRED

    if last_donation_date is not None:
        if days_since(last_donation_date, now) < MIN_DAYS_BETWEEN_DONATIONS:
            return EligibilityStatus.DEFERRED

    return EligibilityStatus.ELIGIBLE


def apply_eligibility_update(
    user: User,
    blood_type=None,
    last_donation_date: Optional[datetime] = None,
    medical_history: Optional[dict] = None,
    now: Optional[datetime] = None
) -> User:
    """
    Apply a donor's eligibility submission to their record (not committed).

    When no medical history is supplied the status goes back to Unknown and
    the previously stored history is left as it was.
    """
    if user.role != UserRole.DONOR:
        raise ForbiddenError("Forbidden: Only donor accounts can submit eligibility.")

    if blood_type:
        user.blood_type = blood_type
    if last_donation_date:
        user.last_donation_date = as_utc(last_donation_date)

    if medical_history is not None:
        user.medical_history = normalize_medical_history(medical_history)
        user.eligibility_status = evaluate_eligibility(user.medical_history, user.last_donation_date, now)
    else:
        user.eligibility_status = EligibilityStatus.UNKNOWN

    logger.info(f"Eligibility for donor {user.email} evaluated as {user.eligibility_status.value}")
    return user
