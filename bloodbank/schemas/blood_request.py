from pydantic import Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from bloodbank.models.blood_request import RequestStatus, RequestUrgency
from bloodbank.models.blood_unit import BloodGroup, ComponentType
from bloodbank.schemas.common import CamelModel, ObjectId, UserSummary
from bloodbank.schemas.blood_unit import AssignedUnit

class BloodRequestCreate(CamelModel):
    blood_group: BloodGroup
    component_type: ComponentType
    quantity: int = Field(..., gt=0)
    urgency: RequestUrgency = RequestUrgency.ROUTINE
    notes: Optional[str] = None
    doctor_id: Optional[str] = None

class StatusUpdate(CamelModel):
    status: str

class FulfillRequest(CamelModel):
    assigned_unit_ids: List[str] = Field(default_factory=list)

class BloodRequestResponse(CamelModel):
    id: ObjectId
    request_id: str
    hospital_id: Optional[UUID] = None
    doctor_id: Optional[UUID] = None
    hospital: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
    blood_group: BloodGroup
    component_type: ComponentType
    quantity: int
    urgency: RequestUrgency
    notes: Optional[str] = None
    status: RequestStatus
    request_date: Optional[datetime] = None
    fulfillment_date: Optional[datetime] = None
    assigned_units: List[AssignedUnit] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BloodRequestEnvelope(CamelModel):
    msg: str
    request: BloodRequestResponse
