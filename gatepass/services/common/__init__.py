# gatepass/services/common/__init__.py
"""
Shared service-layer infrastructure.

- **UnitOfWork**: Transaction boundary & repository factory
- **security**: Password hashing (bcrypt)
- **permissions**: Principal and role checks
- **errors**: Service-layer exception hierarchy

Example usage:
    >>> from gatepass.services.common import UnitOfWork, permissions
    >>>
    >>> with UnitOfWork(session_factory) as uow:
    ...     repo = uow.get_repo(DocumentRepository)
    ...     repo.find("users", user_id)
    >>>
    >>> permissions.require_approver(principal)
"""
from __future__ import annotations

from . import errors, permissions, security
from .permissions import Principal
from .unit_of_work import TransactionError, UnitOfWork

__all__ = [
    # Modules
    "errors",
    "permissions",
    "security",
    # Classes
    "Principal",
    "TransactionError",
    "UnitOfWork",
]
