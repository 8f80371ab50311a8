# gatepass/core/constants.py
"""
Core application constants.

These values centralize the names shared between the services and the
document store:
- Collection and document names.
- Dashboard page identifiers per role.
- Audit activity types.
"""

# Document store collections
USERS_COLLECTION: str = "users"
GATE_PASS_COLLECTION: str = "gatePassRequests"
AUDIT_LOG_COLLECTION: str = "auditLogs"
COMPLAINTS_COLLECTION: str = "complaints"
SYSTEM_COLLECTION: str = "system"

# Documents inside the system collection
SYSTEM_CONFIG_DOC: str = "config"
SYSTEM_COUNTERS_DOC: str = "counters"

# Landing page for a freshly authenticated client
WELCOME_PAGE: str = "welcomePage"
DASHBOARD_PAGES: dict[str, str] = {
    "student": "studentDashboard",
    "parent": "parentDashboard",
    "security": "securityDashboard",
    "warden": "wardenDashboard",
    "admin": "adminDashboard",
}

# Audit activity types
AUDIT_TYPE_AUTH: str = "auth"
AUDIT_TYPE_REGISTRATION: str = "registration"
AUDIT_TYPE_GATE_PASS: str = "gatePass"
AUDIT_TYPE_ACCOUNT: str = "account"
AUDIT_TYPE_COMPLAINT: str = "complaint"
