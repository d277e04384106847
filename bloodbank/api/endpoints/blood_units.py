from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from bloodbank.database.database import get_db
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.blood_unit import (
    BloodUnitCreate,
    BloodUnitUpdate,
    BloodUnitResponse,
    BloodUnitDetail,
    BloodUnitEnvelope,
    InventoryCount
)
from bloodbank.services import inventory_service
from bloodbank.api.endpoints.auth import require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=BloodUnitEnvelope, status_code=status.HTTP_201_CREATED)
async def add_blood_unit(
    unit: BloodUnitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.ADMIN))
):
    """Add a donated unit to a blood bank's inventory."""
    db_unit = inventory_service.add_unit(
        db,
        unit_id=unit.unit_id,
        blood_group=unit.blood_group,
        component_type=unit.component_type,
        collection_date=unit.collection_date,
        expiry_date=unit.expiry_date,
        blood_bank_id=unit.blood_bank_id,
        donor_id=unit.donor_id,
    )
    return BloodUnitEnvelope(msg="Blood unit added successfully", blood_unit=BloodUnitResponse.model_validate(db_unit))

@router.get("", response_model=List[BloodUnitDetail])
async def list_blood_units(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.ADMIN, UserRole.SUPERVISOR))
):
    """List every unit with its blood bank and donor."""
    return [BloodUnitDetail.model_validate(unit) for unit in inventory_service.list_units(db)]

@router.get("/inventory-summary", response_model=List[InventoryCount])
async def inventory_summary(
    blood_bank_id: Optional[str] = Query(None, alias="bloodBankId"),
    db: Session = Depends(get_db)
):
    """Available units per blood group. Public."""
    summary = inventory_service.availability_summary(db, blood_bank_id)
    return [InventoryCount.model_validate(entry) for entry in summary]

@router.put("/{unit_ref}", response_model=BloodUnitEnvelope)
async def update_blood_unit(
    unit_ref: str,
    unit_update: BloodUnitUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.STAFF, UserRole.ADMIN))
):
    """Update a unit's status, recipient or request. The unit may be addressed by id or unitId."""
    db_unit = inventory_service.update_unit(
        db,
        unit_ref,
        status=unit_update.status,
        recipient=unit_update.recipient,
        request=unit_update.request,
    )
    logger.info(f"Blood unit {db_unit.unit_id} updated by {current_user.email}")
    return BloodUnitEnvelope(msg="Blood unit updated successfully", blood_unit=BloodUnitResponse.model_validate(db_unit))
