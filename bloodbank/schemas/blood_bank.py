from pydantic import EmailStr, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import UUID
from bloodbank.models.blood_unit import BloodGroup
from bloodbank.schemas.common import CamelModel, ObjectId

class GeoPoint(CamelModel):
    type: str = "Point"
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0])  # [longitude, latitude]

    @field_validator("type")
    @classmethod
    def point_only(cls, v):
        if v != "Point":
            raise ValueError("location type must be Point")
        return v

    @field_validator("coordinates")
    @classmethod
    def longitude_latitude(cls, v):
        if len(v) != 2:
            raise ValueError("coordinates must be [longitude, latitude]")
        longitude, latitude = v
        if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
            raise ValueError("coordinates out of range")
        return v

class BankAddress(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    location: Optional[GeoPoint] = None

def _validate_charges(v):
    if v is None:
        return v
    for group, price in v.items():
        if price < 0:
            raise ValueError(f"charge for {group.value} cannot be negative")
    return v

class BloodBankCreate(CamelModel):
    name: str = Field(..., min_length=1)
    contact_email: EmailStr
    contact_phone: str = Field(..., min_length=1)
    address: BankAddress
    location: Optional[GeoPoint] = None  # also accepted at the top level
    charges: Optional[Dict[BloodGroup, float]] = None

    @field_validator("charges")
    @classmethod
    def non_negative_charges(cls, v):
        return _validate_charges(v)

class ChargesUpdate(CamelModel):
    charges: Dict[BloodGroup, float]

    @field_validator("charges")
    @classmethod
    def non_negative_charges(cls, v):
        return _validate_charges(v)

class BloodBankSummary(CamelModel):
    id: ObjectId
    name: str
    contact_email: Optional[str] = None
    address: Optional[BankAddress] = None

class BloodBankResponse(CamelModel):
    id: ObjectId
    name: str
    contact_email: str
    contact_phone: str
    address: BankAddress
    charges: Dict[str, float]
    managed_by_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BloodBankEnvelope(CamelModel):
    msg: str
    blood_bank: BloodBankResponse
