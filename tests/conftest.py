"""Pytest configuration and fixtures."""
import os

# Point the app at a throwaway in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from bloodbank.core.config import get_settings
from bloodbank.core.security import create_access_token, hash_password
from bloodbank.database.database import Base, SessionLocal, engine
from bloodbank.main import app
from bloodbank.models.blood_bank import BloodBank, default_charges
from bloodbank.models.blood_request import BloodRequest, RequestStatus
from bloodbank.models.blood_unit import BloodGroup, BloodUnit, ComponentType, UnitStatus
from bloodbank.models.user import User, UserRole
from bloodbank.services.blood_request_service import generate_request_id
from bloodbank.services.utils import utcnow

TEST_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_schema():
    """Every test starts from empty tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(role=UserRole.DONOR, email=None, **fields):
        user = User(
            email=email or f"{role.value}@bloodbank.org",
            hashed_password=hash_password(TEST_PASSWORD, rounds=4),
            role=role,
            first_name=fields.pop("first_name", role.value.title()),
            last_name=fields.pop("last_name", "Tester"),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def auth_headers():
    """x-auth-token header for a user."""
    def _auth_headers(user):
        settings = get_settings()
        token = create_access_token(user.id, user.role.value, settings)
        return {settings.AUTH_HEADER_NAME: token}
    return _auth_headers


@pytest.fixture
def blood_bank(db, make_user):
    admin = make_user(UserRole.ADMIN)
    bank = BloodBank(
        name="Central Blood Bank",
        contact_email="central@bloodbank.org",
        contact_phone="555-0100",
        street="1 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="USA",
        longitude=-89.65,
        latitude=39.78,
        charges=default_charges(),
        managed_by_id=admin.id,
    )
    db.add(bank)
    db.commit()
    db.refresh(bank)
    return bank


@pytest.fixture
def make_unit(db, blood_bank):
    counter = {"n": 0}

    def _make_unit(blood_group=BloodGroup.O_NEG, component_type=ComponentType.RED_BLOOD_CELLS,
                   status=UnitStatus.AVAILABLE, expires_in_days=35, bank=None):
        counter["n"] += 1
        collected = utcnow() - timedelta(days=1)
        unit = BloodUnit(
            unit_id=f"U-{counter['n']:04d}",
            blood_group=blood_group,
            component_type=component_type,
            collection_date=collected,
            expiry_date=utcnow() + timedelta(days=expires_in_days),
            status=status,
            blood_bank_id=(bank or blood_bank).id,
        )
        db.add(unit)
        db.commit()
        db.refresh(unit)
        return unit
    return _make_unit


@pytest.fixture
def make_request(db, make_user):
    def _make_request(hospital=None, blood_group=BloodGroup.O_NEG,
                      component_type=ComponentType.RED_BLOOD_CELLS, quantity=2,
                      status=RequestStatus.PENDING):
        hospital = hospital or make_user(UserRole.HOSPITAL, email=f"hospital-{generate_request_id()}@bloodbank.org")
        blood_request = BloodRequest(
            request_id=generate_request_id(),
            hospital_id=hospital.id,
            blood_group=blood_group,
            component_type=component_type,
            quantity=quantity,
            status=status,
            request_date=utcnow(),
        )
        db.add(blood_request)
        db.commit()
        db.refresh(blood_request)
        return blood_request
    return _make_request
