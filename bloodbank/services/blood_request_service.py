"""
Blood request workflow.

Requests move through Pending -> Approved/Rejected/Cancelled and
Approved -> Fulfilled/Cancelled. Fulfillment claims inventory units with a
conditional update on status = Available and moves the request in the same
transaction, so either every unit and the request change together or nothing
changes.
"""
import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from bloodbank.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from bloodbank.models.blood_request import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    BloodRequest,
    RequestStatus,
    RequestUrgency,
)
from bloodbank.models.blood_unit import BloodGroup, BloodUnit, ComponentType, UnitStatus
from bloodbank.models.user import User, UserRole
from bloodbank.services.utils import parse_object_id, require_object_id, utcnow

logger = logging.getLogger(__name__)

REQUESTER_ROLES = frozenset({UserRole.HOSPITAL, UserRole.DOCTOR})

# Targets accepted by update_status; Fulfilled is only reachable through fulfill_request
STATUS_UPDATE_TARGETS = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED})


def generate_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex.upper()}"


def _with_joins(query):
    return query.options(
        joinedload(BloodRequest.hospital),
        joinedload(BloodRequest.doctor),
    )


def get_request(db: Session, request_ref) -> BloodRequest:
    """Look a request up by its UUID or by its generated REQ- id."""
    object_id = parse_object_id(request_ref)
    query = _with_joins(db.query(BloodRequest))
    if object_id is not None:
        blood_request = query.filter(BloodRequest.id == object_id).first()
    else:
        blood_request = query.filter(BloodRequest.request_id == str(request_ref)).first()

    if not blood_request:
        raise NotFoundError("Blood request not found")
    return blood_request


def list_requests(db: Session) -> List[BloodRequest]:
    return _with_joins(db.query(BloodRequest)).order_by(BloodRequest.request_date.desc()).all()


def list_requests_for(db: Session, requester: User) -> List[BloodRequest]:
    """Requests raised by a hospital or doctor."""
    query = _with_joins(db.query(BloodRequest))
    if requester.role == UserRole.HOSPITAL:
        query = query.filter(BloodRequest.hospital_id == requester.id)
    elif requester.role == UserRole.DOCTOR:
        query = query.filter(BloodRequest.doctor_id == requester.id)
    else:
        raise ForbiddenError("Forbidden: Only hospitals or doctors can view their own requests.")
    return query.order_by(BloodRequest.request_date.desc()).all()


def create_request(
    db: Session,
    requester: User,
    blood_group: BloodGroup,
    component_type: ComponentType,
    quantity: int,
    urgency: RequestUrgency = RequestUrgency.ROUTINE,
    notes: Optional[str] = None,
    doctor_id=None,
) -> BloodRequest:
    """Raise a new Pending request on behalf of a hospital or doctor."""
    if requester.role not in REQUESTER_ROLES:
        raise ForbiddenError("Forbidden: Only hospitals or doctors can create blood requests.")
    if quantity is None or quantity < 1:
        raise BadRequestError("Quantity must be a positive integer")

    hospital_ref = requester.id if requester.role == UserRole.HOSPITAL else None
    doctor_ref = None
    if requester.role == UserRole.DOCTOR:
        doctor_ref = requester.id
    elif doctor_id:
        doctor_uuid = require_object_id(doctor_id, "Doctor User")
        doctor = db.query(User).filter(User.id == doctor_uuid).first()
        if not doctor or doctor.role != UserRole.DOCTOR:
            raise NotFoundError("Associated Doctor not found or is not a doctor role.")
        doctor_ref = doctor.id

    blood_request = BloodRequest(
        request_id=generate_request_id(),
        hospital_id=hospital_ref,
        doctor_id=doctor_ref,
        blood_group=blood_group,
        component_type=component_type,
        quantity=quantity,
        urgency=urgency or RequestUrgency.ROUTINE,
        notes=notes,
        status=RequestStatus.PENDING,
        request_date=utcnow(),
    )
    db.add(blood_request)
    db.commit()
    db.refresh(blood_request)

    logger.info(
        f"Blood request {blood_request.request_id} created by {requester.role.value} {requester.email}: "
        f"{quantity} x {blood_request.blood_group.value} {blood_request.component_type.value}"
    )
    return blood_request


def update_status(db: Session, request_ref, new_status) -> BloodRequest:
    """
    Move a request along the state machine.

    Re-applying the current status is a no-op. Fulfilled is rejected here;
    use fulfill_request so units are always assigned.
    """
    blood_request = get_request(db, request_ref)

    try:
        target = RequestStatus(new_status)
    except ValueError:
        raise BadRequestError("Invalid status provided")
    if target == RequestStatus.FULFILLED:
        raise BadRequestError("Requests can only be fulfilled by assigning units through the fulfill operation")
    if target not in STATUS_UPDATE_TARGETS:
        raise BadRequestError("Invalid status provided")

    current = blood_request.status
    if current == target:
        return blood_request
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(f"Request is already {current.value}. Cannot change it to {target.value}.")

    result = db.execute(
        update(BloodRequest)
        .where(BloodRequest.id == blood_request.id, BloodRequest.status == current)
        .values(status=target, updated_at=utcnow())
    )
    if result.rowcount != 1:
        db.rollback()
        raise ConflictError("Request status changed concurrently, please retry")
    db.commit()
    db.refresh(blood_request)

    logger.info(f"Blood request {blood_request.request_id} moved {current.value} -> {target.value}")
    return blood_request


def _parse_unit_ids(unit_ids: Sequence) -> List[uuid.UUID]:
    if not isinstance(unit_ids, (list, tuple)) or len(unit_ids) == 0:
        raise BadRequestError("Please provide an array of assignedUnitIds")

    parsed = [parse_object_id(unit_id) for unit_id in unit_ids]
    if any(unit_id is None for unit_id in parsed):
        raise BadRequestError("One or more assignedUnitIds are invalid format.")
    if len(set(parsed)) != len(parsed):
        raise BadRequestError("assignedUnitIds must not contain the same unit twice.")
    return parsed


def _load_candidate_units(db: Session, unit_ids: List[uuid.UUID]) -> List[BloodUnit]:
    return db.query(BloodUnit).filter(
        BloodUnit.id.in_(unit_ids),
        BloodUnit.status == UnitStatus.AVAILABLE
    ).all()


def fulfill_request(db: Session, request_ref, unit_ids: Sequence) -> BloodRequest:
    """
    Assign inventory units to an Approved request and mark it Fulfilled.

    Every unit must be Available and match the request's blood group and
    component type, and there must be at least as many units as requested.
    """
    parsed_ids = _parse_unit_ids(unit_ids)
    blood_request = get_request(db, request_ref)

    if blood_request.status in TERMINAL_STATUSES:
        raise ConflictError(f"Request is already {blood_request.status.value}. Cannot fulfill again.")
    if blood_request.status != RequestStatus.APPROVED:
        raise ConflictError(f"Request is {blood_request.status.value}. It must be Approved before it can be fulfilled.")

    units = _load_candidate_units(db, parsed_ids)
    if len(units) < len(parsed_ids):
        raise BadRequestError("One or more assigned units are not found or not available.")
    if len(units) < blood_request.quantity:
        raise BadRequestError(
            f"Not enough available units provided. Requested: {blood_request.quantity}, Provided: {len(units)}"
        )

    units_by_id = {unit.id: unit for unit in units}
    units = [units_by_id[unit_id] for unit_id in parsed_ids]
    for unit in units:
        if unit.blood_group != blood_request.blood_group or unit.component_type != blood_request.component_type:
            raise BadRequestError(
                f"Assigned unit {unit.unit_id} does not match requested blood group/component type."
            )

    fulfilled_at = utcnow()
    try:
        claimed = db.execute(
            update(BloodUnit)
            .where(BloodUnit.id.in_(parsed_ids), BloodUnit.status == UnitStatus.AVAILABLE)
            .values(
                status=UnitStatus.USED,
                recipient_id=blood_request.hospital_id,
                request_id=blood_request.id,
                updated_at=fulfilled_at,
            )
        )
        if claimed.rowcount != len(parsed_ids):
            raise ConflictError("One or more assigned units were claimed by another request. Nothing was changed.")

        moved = db.execute(
            update(BloodRequest)
            .where(BloodRequest.id == blood_request.id, BloodRequest.status == RequestStatus.APPROVED)
            .values(status=RequestStatus.FULFILLED, fulfillment_date=fulfilled_at, updated_at=fulfilled_at)
        )
        if moved.rowcount != 1:
            raise ConflictError("Request status changed concurrently. Nothing was changed.")

        blood_request.assigned_units = units
        db.commit()
    except Exception:
        db.rollback()
        logger.warning(f"Fulfillment of {blood_request.request_id} rolled back")
        raise

    db.refresh(blood_request)
    logger.info(
        f"Blood request {blood_request.request_id} fulfilled with units "
        f"{', '.join(unit.unit_id for unit in blood_request.assigned_units)}"
    )
    return blood_request
