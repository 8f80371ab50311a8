import os

# Must be set before gatepass.config.settings is imported
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from gatepass.core.constants import USERS_COLLECTION
from gatepass.db import build_engine, build_session_factory, init_db
from gatepass.integrations import LocalIdentityProvider, SQLDocumentStore
from gatepass.schemas import UserProfile, UserRole
from gatepass.services.common.permissions import Principal
from gatepass.services.service_factory import ServiceFactory

PASSWORD = "secret1"

ROLE_VALUES = {
    UserRole.STUDENT: {
        "studentId": "S-1001",
        "roomNumber": "A-101",
        "course": "B.Tech",
        "year": "2",
        "parentContact": "9000000000",
    },
    UserRole.PARENT: {"relationship": "Mother"},
    UserRole.SECURITY: {"employeeId": "E-77", "shift": "Night"},
    UserRole.WARDEN: {"employeeId": "W-01", "department": "Block A"},
    UserRole.ADMIN: {"adminCode": "ADM-2024"},
}


def registration_values(role, email, **overrides):
    values = {
        "fullName": email.split("@")[0].replace(".", " ").title(),
        "email": email,
        "phone": "9876543210",
        "username": email.split("@")[0],
        "password": PASSWORD,
        "confirmPassword": PASSWORD,
        **ROLE_VALUES[UserRole(role)],
    }
    values.update(overrides)
    return values


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return SQLDocumentStore(session_factory)


@pytest.fixture
def identity(session_factory):
    return LocalIdentityProvider(session_factory)


@pytest.fixture
def factory(session_factory, store):
    return ServiceFactory(session_factory, store=store)


@pytest.fixture
def client(factory):
    context = factory.new_client()
    yield context
    context.close()


@pytest.fixture
def register(factory):
    """Run a full registration and return the stored profile."""

    def _register(role, email, **overrides):
        context = factory.new_client()
        flow = context.start_registration()
        flow.select_role(role)
        code = flow.submit_profile(registration_values(role, email, **overrides))
        profile = flow.verify_code(code)
        context.close()
        return profile

    return _register


@pytest.fixture
def make_principal(register, store):
    """Register a user, force its status and return its principal."""

    def _make(role, email, status="approved", **overrides):
        profile = register(role, email, **overrides)
        doc = store.update(USERS_COLLECTION, profile.id, {"status": status})
        return Principal.from_profile(UserProfile.from_document(doc.id, doc.data))

    return _make


@pytest.fixture
def warden(make_principal):
    return make_principal("warden", "warden@hostel.edu")


@pytest.fixture
def admin(make_principal):
    return make_principal("admin", "admin@hostel.edu")


@pytest.fixture
def student(make_principal):
    return make_principal("student", "asha.rao@hostel.edu")


@pytest.fixture
def security_guard(make_principal):
    return make_principal("security", "gate.desk@hostel.edu")


@pytest.fixture
def parent(make_principal):
    return make_principal("parent", "parent.rao@hostel.edu")


@pytest.fixture
def gate_pass_form():
    return {
        "reason": "home",
        "destination": "Pune",
        "exitTime": "2024-05-01T09:00:00",
        "returnTime": "2024-05-03T18:00:00",
        "contactPerson": "9000000000",
    }


@pytest.fixture
def values():
    return registration_values
