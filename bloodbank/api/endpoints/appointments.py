from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload
from typing import List
import logging
from bloodbank.core.exceptions import BadRequestError, NotFoundError
from bloodbank.database.database import get_db
from bloodbank.models.appointment import Appointment, AppointmentStatus
from bloodbank.models.blood_bank import BloodBank
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.appointment import (
    AppointmentCreate,
    AppointmentStatusUpdate,
    AppointmentResponse,
    AppointmentEnvelope
)
from bloodbank.services.utils import as_utc, require_object_id
from bloodbank.api.endpoints.auth import require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.DONOR))
):
    """Book a donation appointment at a blood bank."""
    bank_id = require_object_id(appointment.blood_bank, "Blood Bank")
    if not db.query(BloodBank).filter(BloodBank.id == bank_id).first():
        raise NotFoundError("Blood Bank not found.")

    db_appointment = Appointment(
        donor_id=current_user.id,
        blood_bank_id=bank_id,
        appointment_date=as_utc(appointment.appointment_date),
        blood_group=appointment.blood_group,
        notes=appointment.notes,
        status=AppointmentStatus.SCHEDULED,
    )
    db.add(db_appointment)
    db.commit()
    db.refresh(db_appointment)

    logger.info(f"Appointment {db_appointment.id} booked by donor {current_user.email}")
    return AppointmentEnvelope(
        msg="Appointment booked successfully",
        appointment=AppointmentResponse.model_validate(db_appointment)
    )

@router.get("/my", response_model=List[AppointmentResponse])
async def list_my_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.DONOR))
):
    """List the calling donor's appointments."""
    appointments = db.query(Appointment).options(
        joinedload(Appointment.blood_bank)
    ).filter(Appointment.donor_id == current_user.id).order_by(Appointment.appointment_date.asc()).all()
    return [AppointmentResponse.model_validate(a) for a in appointments]

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.SUPERVISOR, UserRole.ADMIN))
):
    """List every appointment with donor and blood bank."""
    appointments = db.query(Appointment).options(
        joinedload(Appointment.donor),
        joinedload(Appointment.blood_bank)
    ).order_by(Appointment.appointment_date.asc()).all()
    return [AppointmentResponse.model_validate(a) for a in appointments]

@router.put("/{appointment_id}/status", response_model=AppointmentEnvelope)
async def update_appointment_status(
    appointment_id: str,
    status_update: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.SUPERVISOR, UserRole.ADMIN))
):
    """Set an appointment's status."""
    appointment = db.query(Appointment).filter(
        Appointment.id == require_object_id(appointment_id, "Appointment")
    ).first()
    if not appointment:
        raise NotFoundError("Appointment not found")

    try:
        new_status = AppointmentStatus(status_update.status)
    except ValueError:
        raise BadRequestError("Invalid status provided")

    if appointment.status != new_status:
        appointment.status = new_status
        db.commit()
        db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} set to {new_status.value} by {current_user.email}")

    return AppointmentEnvelope(
        msg=f"Appointment status updated to {new_status.value}",
        appointment=AppointmentResponse.model_validate(appointment)
    )
