import pytest

from gatepass.core.constants import USERS_COLLECTION, WELCOME_PAGE
from gatepass.schemas import UserRole
from gatepass.services.common.errors import (
    AuthorizationCode,
    AuthorizationError,
    CredentialError,
    IdentityCode,
    ProfileError,
)

PASSWORD = "secret1"


def test_approved_student_signs_in(make_principal, client, store):
    student = make_principal("student", "asha.rao@hostel.edu")

    principal = client.sign_in("student", "asha.rao@hostel.edu", PASSWORD)

    assert principal.user_id == student.user_id
    assert principal.role == UserRole.STUDENT
    assert client.principal == principal
    assert client.page == "studentDashboard"
    assert store.get(USERS_COLLECTION, student.user_id).data["lastLogin"] is not None
    assert principal.profile.last_login is not None


def test_warden_is_approved_at_registration(register, client):
    register("warden", "warden@hostel.edu")
    principal = client.sign_in(UserRole.WARDEN, "warden@hostel.edu", PASSWORD)
    assert client.page == "wardenDashboard"
    assert principal.is_approver


def test_role_mismatch(make_principal, client):
    make_principal("student", "asha.rao@hostel.edu")

    with pytest.raises(AuthorizationError) as exc_info:
        client.sign_in("warden", "asha.rao@hostel.edu", PASSWORD)

    assert exc_info.value.code == AuthorizationCode.ROLE_MISMATCH
    assert client.is_authenticated is False
    assert client.page == WELCOME_PAGE


def test_role_mismatch_signs_identity_out(make_principal, factory, identity):
    make_principal("student", "asha.rao@hostel.edu")
    client = factory.new_client(identity=identity)

    with pytest.raises(AuthorizationError):
        client.sign_in("parent", "asha.rao@hostel.edu", PASSWORD)
    assert identity.current_identity() is None


@pytest.mark.parametrize("status, message", [
    ("pending", "Your account is pending approval"),
    ("rejected", "Your account has been rejected"),
])
def test_unapproved_accounts_are_refused(make_principal, client, status, message):
    make_principal("student", "asha.rao@hostel.edu", status=status)

    with pytest.raises(AuthorizationError) as exc_info:
        client.sign_in("student", "asha.rao@hostel.edu", PASSWORD)
    assert exc_info.value.code == AuthorizationCode.NOT_APPROVED
    assert exc_info.value.message == message


def test_auto_approved_role_skips_status_check(make_principal, client):
    make_principal("admin", "admin@hostel.edu", status="pending")
    principal = client.sign_in("admin", "admin@hostel.edu", PASSWORD)
    assert principal.role == UserRole.ADMIN


def test_wrong_password(make_principal, client):
    make_principal("student", "asha.rao@hostel.edu")
    with pytest.raises(CredentialError) as exc_info:
        client.sign_in("student", "asha.rao@hostel.edu", "nope-nope")
    assert exc_info.value.code == IdentityCode.WRONG_PASSWORD


def test_identity_without_profile(factory, identity):
    identity.create_identity("orphan@hostel.edu", PASSWORD)
    identity.sign_out()
    client = factory.new_client(identity=identity)

    with pytest.raises(ProfileError) as exc_info:
        client.sign_in("student", "orphan@hostel.edu", PASSWORD)
    assert exc_info.value.message == "User data not found"
    assert identity.current_identity() is None


def test_restore_session(make_principal, factory, identity):
    student = make_principal("student", "asha.rao@hostel.edu")
    first = factory.new_client(identity=identity)
    first.sign_in("student", "asha.rao@hostel.edu", PASSWORD)

    second = factory.new_client(identity=identity)
    principal = second.restore()

    assert principal.user_id == student.user_id
    assert second.page == "studentDashboard"


def test_restore_without_identity(client):
    assert client.restore() is None
    assert client.page == WELCOME_PAGE


def test_restore_refuses_unapproved(make_principal, factory, identity):
    make_principal("student", "asha.rao@hostel.edu", status="pending")
    identity.authenticate("asha.rao@hostel.edu", PASSWORD)
    client = factory.new_client(identity=identity)

    with pytest.raises(AuthorizationError):
        client.restore()
    assert identity.current_identity() is None


def test_sign_out_clears_context(make_principal, client):
    make_principal("student", "asha.rao@hostel.edu")
    client.sign_in("student", "asha.rao@hostel.edu", PASSWORD)

    client.sign_out()

    assert client.principal is None
    assert client.page == WELCOME_PAGE


def test_external_sign_out_clears_context(make_principal, factory, identity):
    make_principal("student", "asha.rao@hostel.edu")
    client = factory.new_client(identity=identity)
    client.sign_in("student", "asha.rao@hostel.edu", PASSWORD)

    identity.sign_out()

    assert client.is_authenticated is False
    assert client.page == WELCOME_PAGE
