from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
import logging
from bloodbank.core.exceptions import BadRequestError, NotFoundError
from bloodbank.database.database import get_db
from bloodbank.models.blood_bank import BloodBank, default_charges
from bloodbank.models.user import User, UserRole
from bloodbank.schemas.blood_bank import BloodBankCreate, BloodBankResponse, BloodBankEnvelope, ChargesUpdate
from bloodbank.services.utils import require_object_id
from bloodbank.api.endpoints.auth import require_roles

logger = logging.getLogger(__name__)
router = APIRouter()

def _get_bank(db: Session, bank_id: str) -> BloodBank:
    bank = db.query(BloodBank).filter(BloodBank.id == require_object_id(bank_id, "Blood Bank")).first()
    if not bank:
        raise NotFoundError("Blood Bank not found")
    return bank

@router.post("", response_model=BloodBankEnvelope, status_code=status.HTTP_201_CREATED)
async def create_blood_bank(
    bank: BloodBankCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Register a blood bank facility (Admin only)."""
    contact_email = bank.contact_email.strip().lower()
    name = bank.name.strip()
    existing = db.query(BloodBank).filter(
        or_(BloodBank.name == name, BloodBank.contact_email == contact_email)
    ).first()
    if existing:
        raise BadRequestError("Blood bank with this name or email already exists")

    location = bank.address.location or bank.location
    longitude, latitude = location.coordinates if location else (0.0, 0.0)

    charges = default_charges()
    if bank.charges:
        charges.update({group.value: price for group, price in bank.charges.items()})

    db_bank = BloodBank(
        name=name,
        contact_email=contact_email,
        contact_phone=bank.contact_phone.strip(),
        street=bank.address.street.strip(),
        city=bank.address.city.strip(),
        state=bank.address.state.strip(),
        zip_code=bank.address.zip_code.strip(),
        country=bank.address.country.strip(),
        location_type="Point",
        longitude=longitude,
        latitude=latitude,
        charges=charges,
        managed_by_id=current_user.id,
    )
    db.add(db_bank)
    db.commit()
    db.refresh(db_bank)

    logger.info(f"Blood bank created: {db_bank.name} by admin {current_user.email}")
    return BloodBankEnvelope(msg="Blood bank created successfully", blood_bank=BloodBankResponse.model_validate(db_bank))

@router.get("", response_model=List[BloodBankResponse])
async def list_blood_banks(db: Session = Depends(get_db)):
    """List all blood banks. Public."""
    banks = db.query(BloodBank).order_by(BloodBank.name.asc()).all()
    return [BloodBankResponse.model_validate(bank) for bank in banks]

@router.get("/{bank_id}", response_model=BloodBankResponse)
async def get_blood_bank(bank_id: str, db: Session = Depends(get_db)):
    return BloodBankResponse.model_validate(_get_bank(db, bank_id))

@router.put("/{bank_id}/charges", response_model=BloodBankEnvelope)
async def update_charges(
    bank_id: str,
    charges_update: ChargesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPERVISOR, UserRole.ADMIN))
):
    """Set per-unit charges for the supplied blood groups; other groups keep their price."""
    bank = _get_bank(db, bank_id)

    charges = dict(bank.charges or default_charges())
    charges.update({group.value: price for group, price in charges_update.charges.items()})
    bank.charges = charges
    db.commit()
    db.refresh(bank)

    logger.info(f"Charges for blood bank {bank.name} updated by {current_user.email}")
    return BloodBankEnvelope(msg="Charges updated successfully", blood_bank=BloodBankResponse.model_validate(bank))
