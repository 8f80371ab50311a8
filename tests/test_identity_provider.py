import pytest
from sqlalchemy import select

from gatepass.integrations import LocalIdentityProvider
from gatepass.models import IdentityAccount
from gatepass.services.common.errors import CredentialError, IdentityCode, IdentityError


def test_create_identity_signs_in_and_notifies(identity):
    seen = []
    identity.on_identity_changed(seen.append)

    handle = identity.create_identity("Asha@Hostel.edu", "secret1")

    assert identity.current_identity() == handle
    assert seen == [handle]


def test_password_is_stored_hashed(identity, session_factory):
    identity.create_identity("asha@hostel.edu", "secret1")
    with session_factory() as session:
        account = session.scalars(select(IdentityAccount)).one()
    assert account.email == "asha@hostel.edu"
    assert account.password_hash != "secret1"
    assert account.password_hash.startswith("$2")


def test_duplicate_email_is_rejected_case_insensitively(identity):
    identity.create_identity("asha@hostel.edu", "secret1")
    with pytest.raises(IdentityError) as exc_info:
        identity.create_identity("ASHA@hostel.edu", "secret2")
    assert exc_info.value.code == IdentityCode.EMAIL_IN_USE


def test_invalid_email_is_rejected(identity):
    with pytest.raises(IdentityError) as exc_info:
        identity.create_identity("not-an-email", "secret1")
    assert exc_info.value.code == IdentityCode.INVALID_EMAIL


def test_short_password_is_weak(session_factory):
    provider = LocalIdentityProvider(session_factory, min_password_length=8)
    with pytest.raises(IdentityError) as exc_info:
        provider.create_identity("asha@hostel.edu", "secret1")
    assert exc_info.value.code == IdentityCode.WEAK_CREDENTIAL


def test_authenticate(identity):
    handle = identity.create_identity("asha@hostel.edu", "secret1")
    identity.sign_out()

    assert identity.authenticate(" asha@hostel.edu ", "secret1") == handle
    assert identity.current_identity() == handle


@pytest.mark.parametrize(
    "email, password, code",
    [
        ("asha@hostel.edu", "wrong-one", IdentityCode.WRONG_PASSWORD),
        ("nobody@hostel.edu", "secret1", IdentityCode.NOT_FOUND),
        ("asha-at-hostel", "secret1", IdentityCode.INVALID_FORMAT),
    ],
)
def test_authenticate_failures(identity, email, password, code):
    identity.create_identity("asha@hostel.edu", "secret1")
    identity.sign_out()

    with pytest.raises(CredentialError) as exc_info:
        identity.authenticate(email, password)
    assert exc_info.value.code == code
    assert identity.current_identity() is None


def test_sign_out_of_other_handle_is_ignored(identity):
    handle = identity.create_identity("asha@hostel.edu", "secret1")
    identity.sign_out("someone-else")
    assert identity.current_identity() == handle

    identity.sign_out(handle)
    assert identity.current_identity() is None


def test_unsubscribed_listener_is_not_called(identity):
    seen = []
    unsubscribe = identity.on_identity_changed(seen.append)
    unsubscribe()
    identity.create_identity("asha@hostel.edu", "secret1")
    assert seen == []
