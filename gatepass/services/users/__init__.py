# gatepass/services/users/__init__.py
"""
User-facing services.

- UserService: profile lookups
- UserApprovalService: registration approval queue
- ParentLinkService: parent-to-student linking
"""

from .user_service import UserService
from .user_approval_service import UserApprovalService
from .parent_link_service import ParentLinkService

__all__ = [
    "UserService",
    "UserApprovalService",
    "ParentLinkService",
]
