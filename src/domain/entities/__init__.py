"""
Session Service Domain Entities

Each entity lives in its own file.
"""

from .enums import (
    SessionStatus,
    MembershipRole,
    DeviceType,
    SessionInvalidCause,
)

from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "SessionStatus",
    "MembershipRole",
    "DeviceType",
    "SessionInvalidCause",
    # Entities
    "Session",
    "AuditEvent",
]
