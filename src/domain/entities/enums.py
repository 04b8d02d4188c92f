"""
Social API Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Platform-wide user role"""

    user = "USER"
    admin = "ADMIN"


class SessionState(str, Enum):
    """Lifecycle state of a session, derived from its stored fields"""

    active = "active"
    expired = "expired"
    revoked = "revoked"
