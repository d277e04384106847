from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging
from bloodbank.database.database import get_db
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.blood_request import (
    BloodRequestCreate,
    BloodRequestResponse,
    BloodRequestEnvelope,
    StatusUpdate,
    FulfillRequest
)
from bloodbank.services import blood_request_service
from bloodbank.api.endpoints.auth import require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

REQUESTERS = (UserRole.HOSPITAL, UserRole.DOCTOR)
REVIEWERS = (UserRole.STAFF, UserRole.SUPERVISOR, UserRole.ADMIN)

@router.post("", response_model=BloodRequestEnvelope, status_code=status.HTTP_201_CREATED)
async def create_blood_request(
    request_data: BloodRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REQUESTERS))
):
    """Raise a blood request as a hospital or doctor."""
    blood_request = blood_request_service.create_request(
        db,
        current_user,
        blood_group=request_data.blood_group,
        component_type=request_data.component_type,
        quantity=request_data.quantity,
        urgency=request_data.urgency,
        notes=request_data.notes,
        doctor_id=request_data.doctor_id,
    )
    return BloodRequestEnvelope(
        msg="Blood request created successfully",
        request=BloodRequestResponse.model_validate(blood_request)
    )

@router.get("", response_model=List[BloodRequestResponse])
async def list_blood_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REVIEWERS))
):
    """List every blood request."""
    return [BloodRequestResponse.model_validate(r) for r in blood_request_service.list_requests(db)]

@router.get("/my", response_model=List[BloodRequestResponse])
async def list_my_blood_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REQUESTERS))
):
    """List the caller's own requests."""
    requests = blood_request_service.list_requests_for(db, current_user)
    return [BloodRequestResponse.model_validate(r) for r in requests]

@router.put("/{request_ref}/status", response_model=BloodRequestEnvelope)
async def update_blood_request_status(
    request_ref: str,
    status_update: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REVIEWERS))
):
    """Approve, reject or cancel a request."""
    blood_request = blood_request_service.update_status(db, request_ref, status_update.status)
    logger.info(f"Blood request {blood_request.request_id} set to {blood_request.status.value} by {current_user.email}")
    return BloodRequestEnvelope(
        msg=f"Request status updated to {blood_request.status.value}",
        request=BloodRequestResponse.model_validate(blood_request)
    )

@router.put("/{request_ref}/fulfill", response_model=BloodRequestEnvelope)
async def fulfill_blood_request(
    request_ref: str,
    fulfillment: FulfillRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.ADMIN))
):
    """Assign Available units to an Approved request and mark it Fulfilled."""
    blood_request = blood_request_service.fulfill_request(db, request_ref, fulfillment.assigned_unit_ids)
    logger.info(f"Blood request {blood_request.request_id} fulfilled by {current_user.email}")
    return BloodRequestEnvelope(
        msg="Blood request fulfilled successfully",
        request=BloodRequestResponse.model_validate(blood_request)
    )
