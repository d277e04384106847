from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from bloodbank.models.blood_unit import BloodGroup, ComponentType, UnitStatus
from bloodbank.schemas.common import CamelModel, ObjectId, UserSummary

class BloodUnitCreate(CamelModel):
    unit_id: str = Field(..., min_length=1)
    blood_group: BloodGroup
    component_type: ComponentType
    collection_date: datetime
    expiry_date: datetime
    blood_bank_id: str
    donor_id: Optional[str] = None

class BloodUnitUpdate(CamelModel):
    status: Optional[UnitStatus] = None
    recipient: Optional[str] = None
    request: Optional[str] = None

class BankName(CamelModel):
    id: ObjectId
    name: str

class BloodUnitResponse(CamelModel):
    id: ObjectId
    unit_id: str
    blood_group: BloodGroup
    component_type: ComponentType
    collection_date: datetime
    expiry_date: datetime
    status: UnitStatus
    blood_bank_id: UUID
    donor_id: Optional[UUID] = None
    recipient_id: Optional[UUID] = None
    request_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BloodUnitDetail(BloodUnitResponse):
    """Unit listing with its blood bank and donor joined in."""
    blood_bank: Optional[BankName] = None
    donor: Optional[UserSummary] = None

class AssignedUnit(CamelModel):
    id: ObjectId
    unit_id: str
    blood_group: BloodGroup
    component_type: ComponentType

class InventoryCount(CamelModel):
    blood_group: BloodGroup
    count: int

class BloodUnitEnvelope(CamelModel):
    msg: str
    blood_unit: BloodUnitResponse
