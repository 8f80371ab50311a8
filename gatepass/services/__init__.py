# gatepass/services/__init__.py
"""
Service layer root package.

Each subpackage implements use-cases on top of:

- Pydantic schemas (gatepass.schemas.*)
- The document store and identity provider (gatepass.integrations.*)
- Common service infrastructure (gatepass.services.common.*)

Typical pattern for a service:

    class SomeService:
        def __init__(self, store: DocumentStore) -> None:
            self._store = store

        def some_use_case(self, principal: Principal, ...):
            permissions.require_role(principal, [UserRole.STUDENT])
            ...
"""

from gatepass.services.common import UnitOfWork, errors, permissions, security

__all__ = [
    "UnitOfWork",
    "errors",
    "permissions",
    "security",
]
