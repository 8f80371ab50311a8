# gatepass/services/gatepass/gate_pass_service.py
"""
Gate-pass request lifecycle.

Students file requests, wardens and admins decide them exactly once,
and students, parents, security staff and approvers read them through
role-specific views.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from gatepass.config.settings import settings
from gatepass.core.constants import AUDIT_TYPE_GATE_PASS, GATE_PASS_COLLECTION
from gatepass.integrations.document_store import (
    Document,
    DocumentStore,
    PreconditionFailedError,
    Subscription,
    Where,
)
from gatepass.schemas.enums import ACTIVE_STATUSES, ApprovalStatus, UserRole
from gatepass.schemas.gate_pass import (
    OTHER_REASON,
    GatePassForm,
    GatePassRequest,
    PendingGatePass,
    StudentGatePassView,
)
from gatepass.schemas.user import UserProfile
from gatepass.services.audit.audit_log_service import AuditLogService
from gatepass.services.common import permissions
from gatepass.services.common.errors import (
    AuthorizationCode,
    AuthorizationError,
    NotFoundError,
    RemoteError,
    RequestNotPendingError,
    ValidationCode,
    ValidationError,
)
from gatepass.services.common.permissions import Principal
from gatepass.services.users.user_service import UserService

logger = logging.getLogger(__name__)

RESOURCE = "GatePassRequest"

_REQUIRED_FIELDS = (
    ("reason", "Reason"),
    ("destination", "Destination"),
    ("exit_time", "Exit Time"),
    ("return_time", "Return Time"),
)


def _to_requests(docs: List[Document]) -> List[GatePassRequest]:
    requests = [GatePassRequest.from_document(d.id, d.data) for d in docs]
    requests.sort(key=lambda r: r.created_at, reverse=True)
    return requests


class GatePassService:
    """
    Create, decide and read gate-pass requests.
    """

    def __init__(
        self,
        store: DocumentStore,
        users: UserService,
        audit: AuditLogService,
        *,
        recent_limit: Optional[int] = None,
        unknown_student_label: Optional[str] = None,
    ) -> None:
        self._store = store
        self._users = users
        self._audit = audit
        self.recent_limit = recent_limit or settings.RECENT_ACTIVITY_LIMIT
        self.unknown_student_label = unknown_student_label or settings.UNKNOWN_STUDENT_LABEL

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_request(
        self,
        principal: Principal,
        form: Union[GatePassForm, Mapping[str, Any]],
    ) -> GatePassRequest:
        """
        File a new pending request owned by ``principal``.

        Raises:
            PermissionDenied: If the caller is not a student
            ValidationError: missingField or missingOtherReason
        """
        permissions.require_role(
            principal,
            [UserRole.STUDENT],
            error_message="Only students can request gate passes",
        )
        form = self._parse_form(form)

        for name, label in _REQUIRED_FIELDS:
            value = getattr(form, name)
            if value is None or value == "":
                raise ValidationError(f"Please fill in {label}", field=name)

        reason = form.reason
        if reason == OTHER_REASON:
            if not form.other_reason:
                raise ValidationError(
                    "Please specify the reason",
                    code=ValidationCode.MISSING_OTHER_REASON,
                    field="other_reason",
                )
            reason = form.other_reason

        payload: Dict[str, Any] = {
            "studentId": principal.user_id,
            "reason": reason,
            "destination": form.destination,
            "exitTime": form.exit_time,
            "returnTime": form.return_time,
            "status": ApprovalStatus.PENDING.value,
            "createdAt": self._now(),
        }
        if form.contact_person:
            payload["contactPerson"] = form.contact_person

        request_id = self._store.create(GATE_PASS_COLLECTION, payload)
        logger.info(f"Gate pass {request_id} requested by {principal.user_id}")
        self._audit.record(
            f"Gate pass requested to {form.destination}",
            AUDIT_TYPE_GATE_PASS,
            user_id=principal.user_id,
        )
        return GatePassRequest.from_document(request_id, payload)

    @staticmethod
    def _parse_form(form: Union[GatePassForm, Mapping[str, Any]]) -> GatePassForm:
        if isinstance(form, GatePassForm):
            return form
        try:
            return GatePassForm.model_validate(dict(form))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else None
            raise ValidationError(
                f"Invalid value for {field}" if field else "Invalid gate pass form",
                field=field,
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    # -------------------------------------------------------------------------
    # Read by id
    # -------------------------------------------------------------------------

    def get_request(self, principal: Principal, request_id: str) -> GatePassRequest:
        """
        Raises:
            NotFoundError: If the request does not exist
            AuthorizationError: forbidden, for callers unrelated to it
        """
        request = self._load(request_id)
        if not self._can_read(principal, request):
            raise AuthorizationError(
                "You are not allowed to view this gate pass",
                code=AuthorizationCode.FORBIDDEN,
            )
        return request

    def _load(self, request_id: str) -> GatePassRequest:
        doc = self._store.get(GATE_PASS_COLLECTION, request_id)
        if doc is None:
            raise NotFoundError(RESOURCE, request_id)
        return GatePassRequest.from_document(doc.id, doc.data)

    def _can_read(self, principal: Principal, request: GatePassRequest) -> bool:
        if principal.user_id == request.student_id:
            return True
        if principal.is_approver or principal.has_role(UserRole.SECURITY):
            return True
        if principal.has_role(UserRole.PARENT):
            parent = self._users.get_profile(principal.user_id)
            return parent is not None and parent.linked_child == request.student_id
        return False

    # -------------------------------------------------------------------------
    # Decisions
    # -------------------------------------------------------------------------

    def approve(self, principal: Principal, request_id: str) -> GatePassRequest:
        return self._decide(principal, request_id, ApprovalStatus.APPROVED)

    def reject(self, principal: Principal, request_id: str) -> GatePassRequest:
        return self._decide(principal, request_id, ApprovalStatus.REJECTED)

    def _decide(
        self,
        principal: Principal,
        request_id: str,
        decision: ApprovalStatus,
    ) -> GatePassRequest:
        """
        Move a pending request to ``decision``.

        The write is conditional on the stored status still being
        pending, so two approvers racing on one request produce exactly
        one decision.

        Raises:
            PermissionDenied: If the caller is not an approver
            NotFoundError: If the request does not exist
            RequestNotPendingError: If the request was already decided
        """
        permissions.require_approver(principal)

        current = self._load(request_id)
        if current.status != ApprovalStatus.PENDING:
            raise RequestNotPendingError(RESOURCE, request_id, current.status.value)

        prefix = "approved" if decision == ApprovalStatus.APPROVED else "rejected"
        changes = {
            "status": decision.value,
            f"{prefix}At": self._now(),
            f"{prefix}By": principal.user_id,
        }
        try:
            doc = self._store.update(
                GATE_PASS_COLLECTION,
                request_id,
                changes,
                expected={"status": ApprovalStatus.PENDING.value},
            )
        except PreconditionFailedError:
            latest = self._load(request_id)
            logger.info(f"Gate pass {request_id} was decided concurrently ({latest.status.value})")
            raise RequestNotPendingError(RESOURCE, request_id, latest.status.value)

        logger.info(f"Gate pass {request_id} {prefix} by {principal.user_id}")
        self._audit.record(
            f"Gate pass {request_id} {prefix}",
            AUDIT_TYPE_GATE_PASS,
            user_id=principal.user_id,
        )
        return GatePassRequest.from_document(doc.id, doc.data)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def student_view(self, principal: Principal) -> StudentGatePassView:
        permissions.require_role(principal, [UserRole.STUDENT])
        return self.view_for_student(principal.user_id)

    def parent_view(self, principal: Principal) -> Optional[StudentGatePassView]:
        """
        The linked child's requests; None while no child is linked.

        The parent profile is read fresh so a link made in this session
        is picked up.
        """
        permissions.require_role(principal, [UserRole.PARENT])
        child = self._linked_child(principal)
        if child is None:
            return None
        return self.view_for_student(child)

    def view_for_student(self, student_id: str) -> StudentGatePassView:
        docs = self._store.query(GATE_PASS_COLLECTION, Where("studentId", "==", student_id))
        return self._build_student_view(student_id, docs)

    def approver_view(self, principal: Principal) -> List[PendingGatePass]:
        """Pending requests with owner details, newest first."""
        permissions.require_approver(principal)
        docs = self._store.query(
            GATE_PASS_COLLECTION,
            Where("status", "==", ApprovalStatus.PENDING.value),
        )
        return self._build_pending(docs)

    def list_active(self, principal: Principal) -> List[GatePassRequest]:
        """Pending and approved requests, for the gate desk and approvers."""
        permissions.require_role(principal, [UserRole.SECURITY, UserRole.WARDEN, UserRole.ADMIN])
        docs = self._store.query(
            GATE_PASS_COLLECTION,
            Where("status", "in", [s.value for s in ACTIVE_STATUSES]),
        )
        return _to_requests(docs)

    def count(self, *statuses: ApprovalStatus) -> int:
        where = []
        if statuses:
            where.append(Where("status", "in", [s.value for s in statuses]))
        return len(self._store.query(GATE_PASS_COLLECTION, *where))

    def _linked_child(self, principal: Principal) -> Optional[str]:
        parent = self._users.require_profile(principal.user_id)
        return parent.linked_child

    def _build_student_view(self, student_id: str, docs: List[Document]) -> StudentGatePassView:
        requests = _to_requests(docs)
        return StudentGatePassView(
            student_id=student_id,
            requests=requests,
            recent_activity=requests[: self.recent_limit],
            active_count=sum(1 for r in requests if r.is_active),
        )

    def _build_pending(self, docs: List[Document]) -> List[PendingGatePass]:
        owners: Dict[str, Optional[UserProfile]] = {}
        pending = []
        for request in _to_requests(docs):
            if request.student_id not in owners:
                owners[request.student_id] = self._lookup_owner(request.student_id)
            owner = owners[request.student_id]
            pending.append(PendingGatePass(
                request=request,
                student_label=owner.full_name if owner else self.unknown_student_label,
                student_name=owner.full_name if owner else None,
                student_number=owner.student_id if owner else None,
                room_number=owner.room_number if owner else None,
            ))
        return pending

    def _lookup_owner(self, user_id: str) -> Optional[UserProfile]:
        try:
            return self._users.get_profile(user_id)
        except RemoteError as e:
            logger.warning(f"Owner lookup for {user_id} failed: {e.message}")
            return None

    # -------------------------------------------------------------------------
    # Live views
    # -------------------------------------------------------------------------

    def subscribe_student_view(
        self,
        principal: Principal,
        callback: Callable[[StudentGatePassView], None],
    ) -> Subscription:
        permissions.require_role(principal, [UserRole.STUDENT])
        return self._subscribe_for_student(principal.user_id, callback)

    def subscribe_parent_view(
        self,
        principal: Principal,
        callback: Callable[[StudentGatePassView], None],
    ) -> Optional[Subscription]:
        """Live view of the linked child; None while no child is linked."""
        permissions.require_role(principal, [UserRole.PARENT])
        child = self._linked_child(principal)
        if child is None:
            return None
        return self._subscribe_for_student(child, callback)

    def subscribe_approver_view(
        self,
        principal: Principal,
        callback: Callable[[List[PendingGatePass]], None],
    ) -> Subscription:
        permissions.require_approver(principal)
        return self._store.subscribe(
            GATE_PASS_COLLECTION,
            Where("status", "==", ApprovalStatus.PENDING.value),
            callback=lambda docs: callback(self._build_pending(docs)),
        )

    def _subscribe_for_student(
        self,
        student_id: str,
        callback: Callable[[StudentGatePassView], None],
    ) -> Subscription:
        return self._store.subscribe(
            GATE_PASS_COLLECTION,
            Where("studentId", "==", student_id),
            callback=lambda docs: callback(self._build_student_view(student_id, docs)),
        )
