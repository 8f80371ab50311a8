"""
Collaborators the services call out to: the document store and the
identity provider, with their bundled SQL-backed implementations.
"""

from gatepass.integrations.document_store import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    PreconditionFailedError,
    Subscription,
    Where,
)
from gatepass.integrations.identity_provider import IdentityProvider, LocalIdentityProvider
from gatepass.integrations.sql_document_store import SQLDocumentStore

__all__ = [
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "PreconditionFailedError",
    "Subscription",
    "Where",
    "IdentityProvider",
    "LocalIdentityProvider",
    "SQLDocumentStore",
]
