"""Blood request state machine and all-or-nothing fulfillment."""
import pytest
from sqlalchemy import update

from bloodbank.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from bloodbank.models.blood_request import BloodRequest, RequestStatus
from bloodbank.models.blood_unit import BloodGroup, BloodUnit, ComponentType, UnitStatus
from bloodbank.models.user import UserRole
from bloodbank.services import blood_request_service


def _reload(db, model, object_id):
    db.expire_all()
    return db.query(model).filter(model.id == object_id).one()


def test_create_request_as_hospital(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    blood_request = blood_request_service.create_request(
        db, hospital, BloodGroup.O_NEG, ComponentType.RED_BLOOD_CELLS, 2
    )
    assert blood_request.status == RequestStatus.PENDING
    assert blood_request.hospital_id == hospital.id
    assert blood_request.doctor_id is None
    assert blood_request.request_id.startswith("REQ-")


def test_create_request_as_doctor_records_doctor(db, make_user):
    doctor = make_user(UserRole.DOCTOR)
    blood_request = blood_request_service.create_request(
        db, doctor, BloodGroup.A_POS, ComponentType.PLASMA, 1
    )
    assert blood_request.doctor_id == doctor.id
    assert blood_request.hospital_id is None


def test_donor_cannot_create_request(db, make_user):
    donor = make_user(UserRole.DONOR)
    with pytest.raises(ForbiddenError):
        blood_request_service.create_request(db, donor, BloodGroup.A_POS, ComponentType.PLASMA, 1)


def test_zero_quantity_rejected(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    with pytest.raises(BadRequestError):
        blood_request_service.create_request(db, hospital, BloodGroup.A_POS, ComponentType.PLASMA, 0)


def test_approve_then_fulfill(db, make_request, make_unit):
    blood_request = make_request(quantity=2)
    unit_a = make_unit()
    unit_b = make_unit()

    approved = blood_request_service.update_status(db, blood_request.id, "Approved")
    assert approved.status == RequestStatus.APPROVED

    fulfilled = blood_request_service.fulfill_request(db, blood_request.request_id, [str(unit_a.id), str(unit_b.id)])
    assert fulfilled.status == RequestStatus.FULFILLED
    assert fulfilled.fulfillment_date is not None
    assert {unit.id for unit in fulfilled.assigned_units} == {unit_a.id, unit_b.id}

    for unit_id in (unit_a.id, unit_b.id):
        unit = _reload(db, BloodUnit, unit_id)
        assert unit.status == UnitStatus.USED
        assert unit.recipient_id == blood_request.hospital_id
        assert unit.request_id == blood_request.id


def test_mismatched_unit_changes_nothing(db, make_request, make_unit):
    blood_request = make_request(quantity=2, status=RequestStatus.APPROVED)
    matching = make_unit()
    wrong_group = make_unit(blood_group=BloodGroup.A_POS)

    with pytest.raises(BadRequestError) as excinfo:
        blood_request_service.fulfill_request(db, blood_request.id, [str(matching.id), str(wrong_group.id)])
    assert wrong_group.unit_id in excinfo.value.detail

    assert _reload(db, BloodUnit, matching.id).status == UnitStatus.AVAILABLE
    assert _reload(db, BloodUnit, wrong_group.id).status == UnitStatus.AVAILABLE
    reloaded = _reload(db, BloodRequest, blood_request.id)
    assert reloaded.status == RequestStatus.APPROVED
    assert reloaded.assigned_units == []


def test_reserved_unit_is_not_available(db, make_request, make_unit):
    blood_request = make_request(quantity=1, status=RequestStatus.APPROVED)
    reserved = make_unit(status=UnitStatus.RESERVED)

    with pytest.raises(BadRequestError):
        blood_request_service.fulfill_request(db, blood_request.id, [str(reserved.id)])
    assert _reload(db, BloodRequest, blood_request.id).status == RequestStatus.APPROVED


def test_too_few_units(db, make_request, make_unit):
    blood_request = make_request(quantity=3, status=RequestStatus.APPROVED)
    units = [make_unit(), make_unit()]

    with pytest.raises(BadRequestError) as excinfo:
        blood_request_service.fulfill_request(db, blood_request.id, [str(u.id) for u in units])
    assert "Requested: 3, Provided: 2" in excinfo.value.detail


def test_malformed_and_empty_unit_ids(db, make_request):
    blood_request = make_request(status=RequestStatus.APPROVED)
    with pytest.raises(BadRequestError):
        blood_request_service.fulfill_request(db, blood_request.id, [])
    with pytest.raises(BadRequestError):
        blood_request_service.fulfill_request(db, blood_request.id, ["not-an-id"])


def test_fulfilled_request_cannot_be_fulfilled_again(db, make_request, make_unit):
    blood_request = make_request(quantity=1, status=RequestStatus.APPROVED)
    blood_request_service.fulfill_request(db, blood_request.id, [str(make_unit().id)])

    with pytest.raises(ConflictError):
        blood_request_service.fulfill_request(db, blood_request.id, [str(make_unit().id)])


def test_pending_request_cannot_be_fulfilled(db, make_request, make_unit):
    blood_request = make_request(quantity=1)
    unit = make_unit()
    with pytest.raises(ConflictError):
        blood_request_service.fulfill_request(db, blood_request.id, [str(unit.id)])
    assert _reload(db, BloodUnit, unit.id).status == UnitStatus.AVAILABLE


def test_unit_claimed_between_read_and_write(db, make_request, make_unit, monkeypatch):
    blood_request = make_request(quantity=2, status=RequestStatus.APPROVED)
    unit_a = make_unit()
    unit_b = make_unit()
    original_load = blood_request_service._load_candidate_units

    def load_then_lose_one(session, unit_ids):
        units = original_load(session, unit_ids)
        # another request grabs unit_b after the availability check
        session.execute(
            update(BloodUnit).where(BloodUnit.id == unit_b.id).values(status=UnitStatus.RESERVED)
        )
        return units

    monkeypatch.setattr(blood_request_service, "_load_candidate_units", load_then_lose_one)

    with pytest.raises(ConflictError):
        blood_request_service.fulfill_request(db, blood_request.id, [str(unit_a.id), str(unit_b.id)])

    assert _reload(db, BloodUnit, unit_a.id).status == UnitStatus.AVAILABLE
    reloaded = _reload(db, BloodRequest, blood_request.id)
    assert reloaded.status == RequestStatus.APPROVED
    assert reloaded.assigned_units == []


def test_same_status_is_a_no_op(db, make_request):
    blood_request = make_request(status=RequestStatus.APPROVED)
    result = blood_request_service.update_status(db, blood_request.id, "Approved")
    assert result.status == RequestStatus.APPROVED


def test_fulfilled_cannot_be_set_directly(db, make_request):
    blood_request = make_request(status=RequestStatus.APPROVED)
    with pytest.raises(BadRequestError):
        blood_request_service.update_status(db, blood_request.id, "Fulfilled")


def test_unknown_status_rejected(db, make_request):
    blood_request = make_request()
    with pytest.raises(BadRequestError):
        blood_request_service.update_status(db, blood_request.id, "Shipped")


@pytest.mark.parametrize("terminal", [RequestStatus.REJECTED, RequestStatus.CANCELLED, RequestStatus.FULFILLED])
def test_terminal_requests_do_not_move(db, make_request, terminal):
    blood_request = make_request(status=terminal)
    with pytest.raises(ConflictError):
        blood_request_service.update_status(db, blood_request.id, "Approved")


def test_approved_cannot_go_back_to_rejected(db, make_request):
    blood_request = make_request(status=RequestStatus.APPROVED)
    with pytest.raises(ConflictError):
        blood_request_service.update_status(db, blood_request.id, "Rejected")


def test_approved_can_be_cancelled(db, make_request):
    blood_request = make_request(status=RequestStatus.APPROVED)
    assert blood_request_service.update_status(db, blood_request.id, "Cancelled").status == RequestStatus.CANCELLED


def test_missing_request_is_not_found(db):
    with pytest.raises(NotFoundError):
        blood_request_service.update_status(db, "REQ-DOESNOTEXIST", "Approved")


def test_my_requests_only_lists_own(db, make_user, make_request):
    mine = make_user(UserRole.HOSPITAL, email="mine@bloodbank.org")
    theirs = make_user(UserRole.HOSPITAL, email="theirs@bloodbank.org")
    make_request(hospital=mine)
    make_request(hospital=theirs)

    listed = blood_request_service.list_requests_for(db, mine)
    assert [r.hospital_id for r in listed] == [mine.id]


def test_hospital_links_a_doctor(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    doctor = make_user(UserRole.DOCTOR)
    blood_request = blood_request_service.create_request(
        db, hospital, BloodGroup.B_NEG, ComponentType.PLATELETS, 1, doctor_id=str(doctor.id)
    )
    assert blood_request.hospital_id == hospital.id
    assert blood_request.doctor_id == doctor.id


def test_hospital_links_a_non_doctor(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    donor = make_user(UserRole.DONOR)
    with pytest.raises(NotFoundError):
        blood_request_service.create_request(
            db, hospital, BloodGroup.B_NEG, ComponentType.PLATELETS, 1, doctor_id=str(donor.id)
        )
    assert db.query(BloodRequest).count() == 0


def test_hospital_links_an_unknown_doctor(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    with pytest.raises(NotFoundError):
        blood_request_service.create_request(
            db, hospital, BloodGroup.B_NEG, ComponentType.PLATELETS, 1,
            doctor_id="22222222-2222-2222-2222-222222222222",
        )


def test_hospital_links_a_malformed_doctor_id(db, make_user):
    hospital = make_user(UserRole.HOSPITAL)
    with pytest.raises(BadRequestError):
        blood_request_service.create_request(
            db, hospital, BloodGroup.B_NEG, ComponentType.PLATELETS, 1, doctor_id="dr-who"
        )
    assert db.query(BloodRequest).count() == 0


@pytest.mark.parametrize("terminal", [RequestStatus.CANCELLED, RequestStatus.REJECTED])
def test_closed_requests_cannot_be_fulfilled(db, make_request, make_unit, terminal):
    blood_request = make_request(quantity=1, status=terminal)
    unit = make_unit()

    with pytest.raises(ConflictError):
        blood_request_service.fulfill_request(db, blood_request.id, [str(unit.id)])

    stored_unit = _reload(db, BloodUnit, unit.id)
    assert stored_unit.status == UnitStatus.AVAILABLE
    assert stored_unit.recipient_id is None
    assert stored_unit.request_id is None
    reloaded = _reload(db, BloodRequest, blood_request.id)
    assert reloaded.status == terminal
    assert reloaded.fulfillment_date is None
    assert reloaded.assigned_units == []
