from sqlalchemy import Column, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from bloodbank.database.database import Base, generate_uuid, values_enum
from bloodbank.models.blood_unit import BloodGroup
import enum

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No-Show"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    donor_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    blood_bank_id = Column(Uuid, ForeignKey("blood_banks.id"), nullable=False, index=True)
    appointment_date = Column(DateTime(timezone=True), nullable=False)
    blood_group = Column(values_enum(BloodGroup, "bloodgroup"), nullable=True)
    status = Column(values_enum(AppointmentStatus, "appointmentstatus"), nullable=False, default=AppointmentStatus.SCHEDULED)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    donor = relationship("User")
    blood_bank = relationship("BloodBank")
