from typing import Optional
from datetime import datetime
from uuid import UUID
from bloodbank.models.appointment import AppointmentStatus
from bloodbank.models.blood_unit import BloodGroup
from bloodbank.schemas.common import CamelModel, ObjectId, UserSummary
from bloodbank.schemas.blood_bank import BloodBankSummary

class AppointmentCreate(CamelModel):
    blood_bank: str
    appointment_date: datetime
    blood_group: Optional[BloodGroup] = None
    notes: Optional[str] = None

class AppointmentStatusUpdate(CamelModel):
    status: str

class AppointmentResponse(CamelModel):
    id: ObjectId
    donor_id: UUID
    blood_bank_id: UUID
    donor: Optional[UserSummary] = None
    blood_bank: Optional[BloodBankSummary] = None
    appointment_date: datetime
    blood_group: Optional[BloodGroup] = None
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AppointmentEnvelope(CamelModel):
    msg: str
    appointment: AppointmentResponse
