"""HTTP-level tests: credentials, role gating, request workflow, banks, appointments."""
from datetime import timedelta

from bloodbank.models.user import UserRole
from bloodbank.services.utils import utcnow

from conftest import TEST_PASSWORD

BANK_PAYLOAD = {
    "name": "Riverside Blood Bank",
    "contactEmail": "riverside@bloodbank.org",
    "contactPhone": "555-0142",
    "address": {
        "street": "12 River Rd",
        "city": "Springfield",
        "state": "IL",
        "zipCode": "62704",
        "country": "USA",
        "location": {"type": "Point", "coordinates": [-89.64, 39.8]},
    },
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_and_login(client):
    response = client.post("/api/auth/register", json={
        "email": "New.Donor@bloodbank.org",
        "password": TEST_PASSWORD,
        "firstName": "Nia",
        "lastName": "Okafor",
    })
    assert response.status_code == 201
    assert response.json()["token"]

    response = client.post("/api/auth/login", json={"email": "new.donor@bloodbank.org", "password": TEST_PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]

    response = client.get("/api/profile/me", headers={"x-auth-token": token})
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "donor"
    assert body["eligibilityStatus"] == "Unknown"
    assert "hashedPassword" not in body


def test_register_duplicate_email(client, make_user):
    make_user(UserRole.DONOR, email="taken@bloodbank.org")
    response = client.post("/api/auth/register", json={"email": "taken@bloodbank.org", "password": TEST_PASSWORD})
    assert response.status_code == 400


def test_privileged_role_cannot_self_register(client):
    response = client.post("/api/auth/register", json={
        "email": "sneaky@bloodbank.org",
        "password": TEST_PASSWORD,
        "role": "admin",
    })
    assert response.status_code == 403


def test_short_password_rejected(client):
    response = client.post("/api/auth/register", json={"email": "short@bloodbank.org", "password": "abc"})
    assert response.status_code == 400


def test_login_with_wrong_password(client, make_user):
    make_user(UserRole.DONOR, email="donor@bloodbank.org")
    response = client.post("/api/auth/login", json={"email": "donor@bloodbank.org", "password": "wrong-password"})
    assert response.status_code == 400
    assert response.json() == {"msg": "Invalid Credentials", "detail": "Invalid Credentials"}


def test_missing_and_invalid_token(client):
    response = client.get("/api/profile/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "No token, authorization denied"

    response = client.get("/api/profile/me", headers={"x-auth-token": "garbage"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is not valid"


def test_bearer_header_accepted(client, make_user, auth_headers):
    donor = make_user(UserRole.DONOR)
    token = auth_headers(donor)["x-auth-token"]
    response = client.get("/api/profile/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_donor_cannot_create_blood_request(client, make_user, auth_headers):
    donor = make_user(UserRole.DONOR)
    response = client.post("/api/blood-requests", headers=auth_headers(donor), json={
        "bloodGroup": "O-", "componentType": "Red Blood Cells", "quantity": 1,
    })
    assert response.status_code == 403


def test_invalid_request_body(client, make_user, auth_headers):
    hospital = make_user(UserRole.HOSPITAL)
    response = client.post("/api/blood-requests", headers=auth_headers(hospital), json={
        "bloodGroup": "O-", "componentType": "Red Blood Cells", "quantity": 0,
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request data"


def test_request_workflow_over_http(client, make_user, auth_headers, make_unit):
    hospital = make_user(UserRole.HOSPITAL)
    staff = make_user(UserRole.STAFF)
    units = [make_unit(), make_unit()]

    response = client.post("/api/blood-requests", headers=auth_headers(hospital), json={
        "bloodGroup": "O-", "componentType": "Red Blood Cells", "quantity": 2, "urgency": "Emergency",
    })
    assert response.status_code == 201
    request_id = response.json()["request"]["requestId"]

    mine = client.get("/api/blood-requests/my", headers=auth_headers(hospital)).json()
    assert [r["requestId"] for r in mine] == [request_id]

    # fulfilling before approval is a conflict
    response = client.put(
        f"/api/blood-requests/{request_id}/fulfill",
        headers=auth_headers(staff),
        json={"assignedUnitIds": [str(u.id) for u in units]},
    )
    assert response.status_code == 409

    response = client.put(
        f"/api/blood-requests/{request_id}/status", headers=auth_headers(staff), json={"status": "Approved"}
    )
    assert response.status_code == 200
    assert response.json()["request"]["status"] == "Approved"

    response = client.put(
        f"/api/blood-requests/{request_id}/fulfill",
        headers=auth_headers(staff),
        json={"assignedUnitIds": [str(u.id) for u in units]},
    )
    assert response.status_code == 200
    fulfilled = response.json()["request"]
    assert fulfilled["status"] == "Fulfilled"
    assert sorted(u["unitId"] for u in fulfilled["assignedUnits"]) == sorted(u.unit_id for u in units)

    response = client.put(
        f"/api/blood-requests/{request_id}/status", headers=auth_headers(staff), json={"status": "Cancelled"}
    )
    assert response.status_code == 409

    summary = client.get("/api/blood-units/inventory-summary").json()
    assert {entry["bloodGroup"]: entry["count"] for entry in summary}["O-"] == 0


def test_hospital_cannot_fulfill(client, make_user, auth_headers, make_request, make_unit):
    hospital = make_user(UserRole.HOSPITAL)
    blood_request = make_request(hospital=hospital, quantity=1)
    response = client.put(
        f"/api/blood-requests/{blood_request.id}/fulfill",
        headers=auth_headers(hospital),
        json={"assignedUnitIds": [str(make_unit().id)]},
    )
    assert response.status_code == 403


def test_inventory_summary_is_public(client, make_unit):
    make_unit()
    response = client.get("/api/blood-units/inventory-summary")
    assert response.status_code == 200
    counts = {entry["bloodGroup"]: entry["count"] for entry in response.json()}
    assert counts["O-"] == 1
    assert len(counts) == 8


def test_add_blood_unit_over_http(client, make_user, auth_headers, blood_bank):
    staff = make_user(UserRole.STAFF)
    collected = utcnow()
    payload = {
        "unitId": "BU-7001",
        "bloodGroup": "AB+",
        "componentType": "Platelets",
        "collectionDate": collected.isoformat(),
        "expiryDate": (collected + timedelta(days=5)).isoformat(),
        "bloodBankId": str(blood_bank.id),
    }
    response = client.post("/api/blood-units", headers=auth_headers(staff), json=payload)
    assert response.status_code == 201
    assert response.json()["bloodUnit"]["status"] == "Available"

    response = client.post("/api/blood-units", headers=auth_headers(staff), json=payload)
    assert response.status_code == 400


def test_blood_bank_admin_only_and_unique(client, make_user, auth_headers):
    admin = make_user(UserRole.ADMIN)
    hospital = make_user(UserRole.HOSPITAL)

    assert client.post("/api/blood-banks", headers=auth_headers(hospital), json=BANK_PAYLOAD).status_code == 403

    response = client.post("/api/blood-banks", headers=auth_headers(admin), json=BANK_PAYLOAD)
    assert response.status_code == 201
    bank = response.json()["bloodBank"]
    assert bank["address"]["location"]["coordinates"] == [-89.64, 39.8]
    assert bank["charges"]["O-"] == 0

    response = client.post("/api/blood-banks", headers=auth_headers(admin), json=BANK_PAYLOAD)
    assert response.status_code == 400

    listed = client.get("/api/blood-banks").json()
    assert [b["name"] for b in listed] == ["Riverside Blood Bank"]


def test_supervisor_updates_charges(client, make_user, auth_headers, blood_bank):
    supervisor = make_user(UserRole.SUPERVISOR)
    response = client.put(
        f"/api/blood-banks/{blood_bank.id}/charges",
        headers=auth_headers(supervisor),
        json={"charges": {"A+": 120.5}},
    )
    assert response.status_code == 200
    charges = response.json()["bloodBank"]["charges"]
    assert charges["A+"] == 120.5
    assert charges["B-"] == 0


def test_malformed_bank_id(client):
    response = client.get("/api/blood-banks/not-a-uuid")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid Blood Bank ID format"


def test_appointment_lifecycle(client, make_user, auth_headers, blood_bank):
    donor = make_user(UserRole.DONOR)
    staff = make_user(UserRole.STAFF)

    response = client.post("/api/appointments", headers=auth_headers(donor), json={
        "bloodBank": str(blood_bank.id),
        "appointmentDate": (utcnow() + timedelta(days=3)).isoformat(),
        "bloodGroup": "O+",
    })
    assert response.status_code == 201
    appointment_id = response.json()["appointment"]["_id"]

    mine = client.get("/api/appointments/my", headers=auth_headers(donor)).json()
    assert [a["_id"] for a in mine] == [appointment_id]
    assert mine[0]["bloodBank"]["name"] == "Central Blood Bank"

    response = client.put(
        f"/api/appointments/{appointment_id}/status", headers=auth_headers(staff), json={"status": "Completed"}
    )
    assert response.status_code == 200
    assert response.json()["appointment"]["status"] == "Completed"

    response = client.put(
        f"/api/appointments/{appointment_id}/status", headers=auth_headers(staff), json={"status": "Lost"}
    )
    assert response.status_code == 400


def test_appointment_at_unknown_bank(client, make_user, auth_headers):
    donor = make_user(UserRole.DONOR)
    response = client.post("/api/appointments", headers=auth_headers(donor), json={
        "bloodBank": "00000000-0000-0000-0000-000000000000",
        "appointmentDate": (utcnow() + timedelta(days=3)).isoformat(),
    })
    assert response.status_code == 404


def test_eligibility_over_http(client, make_user, auth_headers):
    donor = make_user(UserRole.DONOR)
    response = client.put("/api/profile/eligibility", headers=auth_headers(donor), json={
        "bloodType": "A-",
        "lastDonationDate": (utcnow() - timedelta(days=10)).isoformat(),
        "medicalHistory": {"hasChronicIllness": False},
    })
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["eligibilityStatus"] == "Deferred"
    assert user["bloodType"] == "A-"

    hospital = make_user(UserRole.HOSPITAL)
    response = client.put("/api/profile/eligibility", headers=auth_headers(hospital), json={})
    assert response.status_code == 403


def test_admin_creates_staff_account(client, make_user, auth_headers):
    admin = make_user(UserRole.ADMIN)
    response = client.post("/api/users", headers=auth_headers(admin), json={
        "email": "staff.two@bloodbank.org",
        "password": TEST_PASSWORD,
        "role": "bloodbank_staff",
    })
    assert response.status_code == 201

    listed = client.get("/api/users?role=bloodbank_staff", headers=auth_headers(admin)).json()
    assert [u["email"] for u in listed] == ["staff.two@bloodbank.org"]


def test_errors_carry_msg(client):
    response = client.get("/api/profile/me")
    assert response.json()["msg"] == "No token, authorization denied"

    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": TEST_PASSWORD})
    assert response.status_code == 400
    assert response.json()["msg"] == "Invalid request data"


def test_records_are_keyed_by_underscore_id(client, make_user, auth_headers, blood_bank):
    staff = make_user(UserRole.STAFF)

    bank = client.get("/api/blood-banks").json()[0]
    assert bank["_id"] == str(blood_bank.id)
    assert "id" not in bank

    # the staff form posts the bank's _id back as bloodBankId
    collected = utcnow()
    response = client.post("/api/blood-units", headers=auth_headers(staff), json={
        "unitId": "BU-7100",
        "bloodGroup": "B+",
        "componentType": "Plasma",
        "collectionDate": collected.isoformat(),
        "expiryDate": (collected + timedelta(days=30)).isoformat(),
        "bloodBankId": bank["_id"],
    })
    assert response.status_code == 201
    unit = response.json()["bloodUnit"]
    assert unit["bloodBankId"] == bank["_id"]

    listed = client.get("/api/blood-units", headers=auth_headers(staff)).json()
    assert listed[0]["_id"] == unit["_id"]
    assert listed[0]["bloodBank"]["_id"] == bank["_id"]
