from sqlalchemy import Column, String, DateTime, JSON, Uuid
from sqlalchemy.sql import func
from bloodbank.database.database import Base, generate_uuid, values_enum
from bloodbank.models.blood_unit import BloodGroup
import enum

class UserRole(str, enum.Enum):
    DONOR = "donor"
    HOSPITAL = "hospital"
    DOCTOR = "doctor"
    STAFF = "bloodbank_staff"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"

# Roles a visitor may pick for themselves at registration
SELF_REGISTERABLE_ROLES = frozenset({UserRole.DONOR, UserRole.HOSPITAL, UserRole.DOCTOR})

class EligibilityStatus(str, enum.Enum):
    UNKNOWN = "Unknown"
    ELIGIBLE = "Eligible"
    DEFERRED = "Deferred"
    NEEDS_REVIEW = "Needs Review"

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(values_enum(UserRole, "userrole"), nullable=False, default=UserRole.DONOR)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    contact_number = Column(String, nullable=True)
    address = Column(JSON, nullable=True)  # street, city, state, zipCode, country

    # Donor eligibility
    blood_type = Column(values_enum(BloodGroup, "bloodgroup"), nullable=True)
    last_donation_date = Column(DateTime(timezone=True), nullable=True)
    eligibility_status = Column(
        values_enum(EligibilityStatus, "eligibilitystatus"),
        nullable=False,
        default=EligibilityStatus.UNKNOWN
    )
    medical_history = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
