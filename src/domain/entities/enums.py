"""
Session Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Derived session status (never persisted)"""

    active = "active"
    expired = "expired"
    revoked = "revoked"


class MembershipRole(str, Enum):
    """Role of the authenticated principal, as verified at login"""

    super_admin = "super_admin"
    owner = "owner"
    admin = "admin"
    member = "member"
    viewer = "viewer"


class DeviceType(str, Enum):
    """Coarse device class derived from the user agent"""

    mobile = "mobile"
    tablet = "tablet"
    desktop = "desktop"
    bot = "bot"
    unknown = "unknown"


class SessionInvalidCause(str, Enum):
    """Server-side reason a token failed validation (never sent to clients)"""

    unknown = "unknown"
    expired = "expired"
    revoked = "revoked"
