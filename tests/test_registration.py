import pytest
from sqlalchemy import func, select

from gatepass.core.constants import AUDIT_LOG_COLLECTION, USERS_COLLECTION
from gatepass.models import IdentityAccount
from gatepass.schemas import ApprovalStatus, RegistrationStep, UserRole
from gatepass.services.common.errors import (
    ConflictError,
    IdentityCode,
    IdentityError,
    RemoteError,
    ValidationCode,
    ValidationError,
)


def identity_count(session_factory):
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(IdentityAccount))


@pytest.fixture
def flow(client):
    return client.start_registration()


@pytest.mark.parametrize(
    "role, status",
    [
        ("warden", ApprovalStatus.APPROVED),
        ("admin", ApprovalStatus.APPROVED),
        ("student", ApprovalStatus.PENDING),
        ("parent", ApprovalStatus.PENDING),
        ("security", ApprovalStatus.PENDING),
    ],
)
def test_initial_status_follows_role(register, store, role, status):
    profile = register(role, f"{role}@hostel.edu")

    assert profile.status == status
    assert store.get(USERS_COLLECTION, profile.id).data["status"] == status.value


def test_stored_profile_shape(flow, store, values):
    flow.select_role("student")
    code = flow.submit_profile(values("student", "asha.rao@hostel.edu"))
    profile = flow.verify_code(code)

    data = store.get(USERS_COLLECTION, profile.id).data
    assert data["role"] == "student"
    assert data["fullName"] == "Asha Rao"
    assert data["studentId"] == "S-1001"
    assert data["lastLogin"] is None
    assert "createdAt" in data
    assert "password" not in data
    assert "confirmPassword" not in data
    assert "childStudentId" not in data
    assert flow.step == RegistrationStep.DONE


def test_commit_signs_the_new_identity_out(client, values):
    flow = client.start_registration()
    flow.select_role(UserRole.WARDEN)
    flow.verify_code(flow.submit_profile(values("warden", "warden@hostel.edu")))

    assert client.registration is flow
    assert client.is_authenticated is False


def test_commit_bumps_counters_and_writes_audit_entry(register, factory, store):
    register("student", "asha.rao@hostel.edu")
    register("warden", "warden@hostel.edu")

    counters = factory.system().get_counters()
    assert counters == {
        "totalRegistrations": 2,
        "studentRegistrations": 1,
        "wardenRegistrations": 1,
    }
    activities = [d.data["activity"] for d in store.query(AUDIT_LOG_COLLECTION)]
    assert "New student registered: Asha Rao" in activities


def test_weak_password_creates_nothing(flow, store, session_factory, values):
    flow.select_role("student")
    with pytest.raises(ValidationError) as exc_info:
        flow.submit_profile(values("student", "asha@hostel.edu", password="abcde", confirmPassword="abcde"))

    assert exc_info.value.code == ValidationCode.WEAK_PASSWORD
    assert flow.step == RegistrationStep.COLLECTING_PROFILE
    assert identity_count(session_factory) == 0
    assert store.query(USERS_COLLECTION) == []


def test_password_length_counts_surrounding_spaces(flow, values):
    flow.select_role("student")
    code = flow.submit_profile(values("student", "asha@hostel.edu", password=" abcde", confirmPassword=" abcde"))
    assert flow.step == RegistrationStep.AWAITING_CODE
    assert flow.values["password"] == " abcde"
    assert flow.verify_code(code).email == "asha@hostel.edu"


def test_password_is_registered_as_typed(register, client):
    register("warden", "warden@hostel.edu", password="secret1 ", confirmPassword="secret1 ")

    principal = client.sign_in("warden", "warden@hostel.edu", "secret1 ")
    assert principal.role == UserRole.WARDEN


def test_blank_password_is_missing(flow, values):
    flow.select_role("student")
    with pytest.raises(ValidationError) as exc_info:
        flow.submit_profile(values("student", "asha@hostel.edu", password="   ", confirmPassword="   "))
    assert exc_info.value.code == ValidationCode.MISSING_FIELD
    assert exc_info.value.field == "password"


@pytest.mark.parametrize(
    "overrides, code, field",
    [
        # A missing common field wins over a mismatch
        ({"phone": "  ", "confirmPassword": "other1"}, ValidationCode.MISSING_FIELD, "phone"),
        # A mismatch wins over a weak password
        ({"password": "abc", "confirmPassword": "abd"}, ValidationCode.PASSWORD_MISMATCH, "confirmPassword"),
        # A weak password wins over a missing role field
        ({"password": "abc", "confirmPassword": "abc", "roomNumber": ""}, ValidationCode.WEAK_PASSWORD, "password"),
        ({"roomNumber": ""}, ValidationCode.MISSING_FIELD, "roomNumber"),
    ],
)
def test_validation_order(flow, values, overrides, code, field):
    flow.select_role("student")
    with pytest.raises(ValidationError) as exc_info:
        flow.submit_profile(values("student", "asha@hostel.edu", **overrides))
    assert exc_info.value.code == code
    assert exc_info.value.field == field


def test_parent_child_student_id_is_optional(flow, values):
    flow.select_role("parent")
    profile = flow.verify_code(flow.submit_profile(values("parent", "mom@hostel.edu")))
    assert profile.child_student_id is None


def test_unknown_fields_are_dropped(flow, store, values):
    flow.select_role("admin")
    code = flow.submit_profile(values("admin", "admin@hostel.edu", status="approved", studentId="S-9"))
    profile = flow.verify_code(code)

    data = store.get(USERS_COLLECTION, profile.id).data
    assert "studentId" not in data
    assert data["adminCode"] == "ADM-2024"


def test_wrong_code_keeps_waiting(flow, values):
    flow.select_role("student")
    code = flow.submit_profile(values("student", "asha@hostel.edu"))
    wrong = "0" * len(code) if code != "0" * len(code) else "1" * len(code)

    with pytest.raises(ValidationError) as exc_info:
        flow.verify_code(wrong)
    assert exc_info.value.code == ValidationCode.INVALID_PASSCODE
    assert flow.step == RegistrationStep.AWAITING_CODE

    assert flow.verify_code(code).email == "asha@hostel.edu"


def test_resend_replaces_the_code(flow, values):
    flow.select_role("student")
    flow.submit_profile(values("student", "asha@hostel.edu"))
    code = flow.resend_code()
    assert flow.verify_code(code).role == UserRole.STUDENT


def test_back_keeps_entered_values(flow, values):
    flow.select_role("student")
    flow.submit_profile(values("student", "asha@hostel.edu"))

    assert flow.back() == RegistrationStep.COLLECTING_PROFILE
    assert flow.values["roomNumber"] == "A-101"
    assert flow.back() == RegistrationStep.COLLECTING_ROLE
    assert flow.role == UserRole.STUDENT
    assert flow.values["email"] == "asha@hostel.edu"


def test_calls_in_the_wrong_step_conflict(flow, values):
    with pytest.raises(ConflictError):
        flow.verify_code("123456")
    with pytest.raises(ConflictError):
        flow.submit_profile(values("student", "asha@hostel.edu"))
    with pytest.raises(ConflictError):
        flow.back()

    flow.select_role("student")
    with pytest.raises(ConflictError):
        flow.select_role("parent")


def test_invalid_role(flow):
    with pytest.raises(ValidationError) as exc_info:
        flow.select_role("janitor")
    assert exc_info.value.field == "role"
    assert flow.step == RegistrationStep.COLLECTING_ROLE


def test_email_in_use_returns_to_code_step(register, client, values):
    register("student", "asha@hostel.edu")

    flow = client.start_registration()
    flow.select_role("student")
    code = flow.submit_profile(values("student", "asha@hostel.edu", fullName="Someone Else"))

    with pytest.raises(IdentityError) as exc_info:
        flow.verify_code(code)
    assert exc_info.value.code == IdentityCode.EMAIL_IN_USE
    assert flow.step == RegistrationStep.AWAITING_CODE
    assert flow.values["fullName"] == "Someone Else"


class UsersWriteFails:
    """Store whose writes to the users collection fail."""

    def __init__(self, inner):
        self._inner = inner

    def set(self, collection, doc_id, data, *, merge=False):
        if collection == USERS_COLLECTION:
            raise RemoteError("store unavailable")
        return self._inner.set(collection, doc_id, data, merge=merge)

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_profile_write_failure_returns_to_code_step(session_factory, store, values):
    from gatepass.services.service_factory import ServiceFactory

    factory = ServiceFactory(session_factory, store=UsersWriteFails(store))
    client = factory.new_client()
    flow = client.start_registration()
    flow.select_role("student")
    code = flow.submit_profile(values("student", "asha@hostel.edu"))

    with pytest.raises(RemoteError):
        flow.verify_code(code)
    assert flow.step == RegistrationStep.AWAITING_CODE
    assert store.query(USERS_COLLECTION) == []
