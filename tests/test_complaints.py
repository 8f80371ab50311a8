import pytest

from gatepass.schemas import ApprovalStatus
from gatepass.services.common.errors import AuthorizationError, ValidationError


@pytest.fixture
def complaints(factory):
    return factory.complaints()


def test_submit_and_list_own(complaints, student, make_principal):
    other = make_principal("student", "ravi@hostel.edu", studentId="S-2002")
    complaint = complaints.submit(student, {"type": "maintenance", "description": "Fan broken", "location": "A-101"})
    complaints.submit(other, {"type": "food", "description": "Cold dinner"})

    assert complaint.status == ApprovalStatus.PENDING
    assert complaint.student_id == student.user_id
    assert [c.id for c in complaints.list_own(student)] == [complaint.id]


@pytest.mark.parametrize("form", [
    {"type": "", "description": "Fan broken"},
    {"type": "maintenance", "description": "   "},
])
def test_type_and_description_required(complaints, student, form):
    with pytest.raises(ValidationError):
        complaints.submit(student, form)


def test_approvers_list_all(complaints, student, warden):
    complaints.submit(student, {"type": "noise", "description": "Loud music"})
    complaints.submit(student, {"type": "food", "description": "Cold dinner"})

    listed = complaints.list_all(warden)
    assert [c.type for c in listed] == ["food", "noise"]


def test_permissions(complaints, warden, student):
    with pytest.raises(AuthorizationError):
        complaints.submit(warden, {"type": "noise", "description": "Loud"})
    with pytest.raises(AuthorizationError):
        complaints.list_all(student)
