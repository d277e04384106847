from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from bloodbank.database.database import Base, generate_uuid, values_enum
from bloodbank.models.blood_unit import BloodGroup, ComponentType
import enum

class RequestStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FULFILLED = "Fulfilled"
    CANCELLED = "Cancelled"

class RequestUrgency(str, enum.Enum):
    ROUTINE = "Routine"
    URGENT = "Urgent"
    EMERGENCY = "Emergency"

TERMINAL_STATUSES = frozenset({RequestStatus.FULFILLED, RequestStatus.REJECTED, RequestStatus.CANCELLED})

# Allowed moves of the request state machine
ALLOWED_TRANSITIONS = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.FULFILLED, RequestStatus.CANCELLED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.FULFILLED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

blood_request_units = Table(
    "blood_request_units",
    Base.metadata,
    Column("blood_request_id", Uuid, ForeignKey("blood_requests.id"), primary_key=True),
    Column("blood_unit_id", Uuid, ForeignKey("blood_units.id"), primary_key=True),
)

class BloodRequest(Base):
    __tablename__ = "blood_requests"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_blood_requests_quantity_positive"),
    )

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    request_id = Column(String, unique=True, index=True, nullable=False)
    hospital_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    doctor_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    blood_group = Column(values_enum(BloodGroup, "bloodgroup"), nullable=False)
    component_type = Column(values_enum(ComponentType, "componenttype"), nullable=False)
    quantity = Column(Integer, nullable=False)
    urgency = Column(values_enum(RequestUrgency, "requesturgency"), nullable=False, default=RequestUrgency.ROUTINE)
    notes = Column(Text, nullable=True)
    status = Column(values_enum(RequestStatus, "requeststatus"), nullable=False, default=RequestStatus.PENDING, index=True)
    request_date = Column(DateTime(timezone=True), server_default=func.now())
    fulfillment_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    hospital = relationship("User", foreign_keys=[hospital_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    assigned_units = relationship("BloodUnit", secondary=blood_request_units, lazy="selectin")
