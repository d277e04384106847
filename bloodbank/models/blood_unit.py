from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from bloodbank.database.database import Base, generate_uuid, values_enum
import enum

class BloodGroup(str, enum.Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"

class ComponentType(str, enum.Enum):
    WHOLE_BLOOD = "Whole Blood"
    RED_BLOOD_CELLS = "Red Blood Cells"
    PLASMA = "Plasma"
    PLATELETS = "Platelets"
    CRYOPRECIPITATE = "Cryoprecipitate"

class UnitStatus(str, enum.Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    USED = "Used"
    DISCARDED = "Discarded"
    EXPIRED = "Expired"

class BloodUnit(Base):
    __tablename__ = "blood_units"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    unit_id = Column(String, unique=True, index=True, nullable=False)  # external barcode id
    blood_group = Column(values_enum(BloodGroup, "bloodgroup"), nullable=False, index=True)
    component_type = Column(values_enum(ComponentType, "componenttype"), nullable=False)
    collection_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(values_enum(UnitStatus, "unitstatus"), nullable=False, default=UnitStatus.AVAILABLE, index=True)
    blood_bank_id = Column(Uuid, ForeignKey("blood_banks.id"), nullable=False, index=True)
    donor_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    recipient_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    request_id = Column(Uuid, ForeignKey("blood_requests.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    blood_bank = relationship("BloodBank")
    donor = relationship("User", foreign_keys=[donor_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
