from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from bloodbank.models.user import UserRole, EligibilityStatus
from bloodbank.models.blood_unit import BloodGroup
from bloodbank.schemas.common import CamelModel, ObjectId, Address

class MedicalHistory(CamelModel):
    has_chronic_illness: bool = False
    recent_travel_to_risk_area: bool = False
    recent_surgery: bool = False
    on_medication: bool = False
    notes: Optional[str] = ""

class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[Address] = None

class UserLogin(CamelModel):
    email: EmailStr
    password: str

class ProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[Address] = None

class EligibilityUpdate(CamelModel):
    blood_type: Optional[BloodGroup] = None
    last_donation_date: Optional[datetime] = None
    medical_history: Optional[MedicalHistory] = None

class UserResponse(CamelModel):
    id: ObjectId
    email: str
    role: UserRole
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[Address] = None
    blood_type: Optional[BloodGroup] = None
    last_donation_date: Optional[datetime] = None
    eligibility_status: EligibilityStatus = EligibilityStatus.UNKNOWN
    medical_history: Optional[MedicalHistory] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class TokenResponse(CamelModel):
    msg: str
    token: str

class UserEnvelope(CamelModel):
    msg: str
    user: UserResponse
