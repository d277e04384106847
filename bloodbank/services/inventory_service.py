"""Blood unit inventory: intake, listing, availability summary and status updates."""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from bloodbank.core.exceptions import BadRequestError, NotFoundError
from bloodbank.models.blood_bank import BloodBank
from bloodbank.models.blood_request import BloodRequest
from bloodbank.models.blood_unit import BloodGroup, BloodUnit, ComponentType, UnitStatus
from bloodbank.models.user import User, UserRole
from bloodbank.services.utils import as_utc, parse_object_id, require_object_id, utcnow

logger = logging.getLogger(__name__)


def add_unit(
    db: Session,
    unit_id: str,
    blood_group: BloodGroup,
    component_type: ComponentType,
    collection_date: datetime,
    expiry_date: datetime,
    blood_bank_id,
    donor_id=None,
) -> BloodUnit:
    """Register a donated unit as Available stock of a blood bank."""
    unit_id = (unit_id or "").strip()
    if not unit_id:
        raise BadRequestError("unitId is required")
    if db.query(BloodUnit).filter(BloodUnit.unit_id == unit_id).first():
        raise BadRequestError("Blood unit with this ID already exists")

    collection_date = as_utc(collection_date)
    expiry_date = as_utc(expiry_date)
    if expiry_date <= collection_date:
        raise BadRequestError("Expiry date must be after collection date")

    bank_uuid = require_object_id(blood_bank_id, "Blood Bank")
    if not db.query(BloodBank).filter(BloodBank.id == bank_uuid).first():
        raise NotFoundError("Associated Blood Bank not found")

    donor_ref = None
    if donor_id:
        donor_uuid = require_object_id(donor_id, "Donor User")
        donor = db.query(User).filter(User.id == donor_uuid).first()
        if not donor or donor.role != UserRole.DONOR:
            raise NotFoundError("Associated Donor not found or is not a donor role")
        donor_ref = donor.id

    unit = BloodUnit(
        unit_id=unit_id,
        blood_group=blood_group,
        component_type=component_type,
        collection_date=collection_date,
        expiry_date=expiry_date,
        status=UnitStatus.AVAILABLE,
        blood_bank_id=bank_uuid,
        donor_id=donor_ref,
    )
    db.add(unit)
    db.commit()
    db.refresh(unit)

    logger.info(f"Blood unit {unit.unit_id} ({unit.blood_group.value} {unit.component_type.value}) added")
    return unit


def list_units(db: Session) -> List[BloodUnit]:
    return db.query(BloodUnit).options(
        joinedload(BloodUnit.blood_bank),
        joinedload(BloodUnit.donor),
    ).order_by(BloodUnit.created_at.desc()).all()


def get_unit(db: Session, unit_ref) -> BloodUnit:
    """Look a unit up by its UUID, falling back to its external unitId."""
    object_id = parse_object_id(unit_ref)
    unit = None
    if object_id is not None:
        unit = db.query(BloodUnit).filter(BloodUnit.id == object_id).first()
    if unit is None:
        unit = db.query(BloodUnit).filter(BloodUnit.unit_id == str(unit_ref)).first()
    if unit is None:
        raise NotFoundError("Blood unit not found")
    return unit


def availability_summary(db: Session, blood_bank_id=None) -> List[Dict]:
    """Count Available units per blood group; every group is listed, sorted by label."""
    query = db.query(BloodUnit.blood_group, func.count(BloodUnit.id)).filter(
        BloodUnit.status == UnitStatus.AVAILABLE
    )
    if blood_bank_id:
        query = query.filter(BloodUnit.blood_bank_id == require_object_id(blood_bank_id, "Blood Bank"))

    counts = {group: count for group, count in query.group_by(BloodUnit.blood_group).all()}
    return [
        {"blood_group": group, "count": counts.get(group, 0)}
        for group in sorted(BloodGroup, key=lambda g: g.value)
    ]


def update_unit(
    db: Session,
    unit_ref,
    status: Optional[UnitStatus] = None,
    recipient=None,
    request=None,
) -> BloodUnit:
    """Set a unit's status and/or its recipient and request references."""
    unit = get_unit(db, unit_ref)

    update_fields = {}
    if status:
        update_fields["status"] = UnitStatus(status)
    if recipient:
        recipient_uuid = require_object_id(recipient, "Recipient User")
        if not db.query(User.id).filter(User.id == recipient_uuid).first():
            raise NotFoundError("Recipient user not found")
        update_fields["recipient_id"] = recipient_uuid
    if request:
        request_uuid = require_object_id(request, "Blood Request")
        if not db.query(BloodRequest.id).filter(BloodRequest.id == request_uuid).first():
            raise NotFoundError("Blood request not found")
        update_fields["request_id"] = request_uuid

    for field, value in update_fields.items():
        setattr(unit, field, value)
    db.commit()
    db.refresh(unit)

    logger.info(f"Blood unit {unit.unit_id} updated: {', '.join(update_fields) or 'no changes'}")
    return unit


def expire_stale_units(db: Session, now: Optional[datetime] = None) -> int:
    """Mark Available units whose expiry date has passed as Expired; returns how many."""
    now = as_utc(now or utcnow())
    result = db.execute(
        update(BloodUnit)
        .where(BloodUnit.status == UnitStatus.AVAILABLE, BloodUnit.expiry_date <= now)
        .values(status=UnitStatus.EXPIRED, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    expired = result.rowcount or 0
    if expired:
        logger.info(f"Expired {expired} blood unit(s) past their expiry date")
    return expired
