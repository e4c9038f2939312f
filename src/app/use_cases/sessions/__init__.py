"""
Session Use Cases

Lifecycle (create, validate, revoke), read-side queries and retention.
"""

from .create_session_use_case import CreateSessionUseCase
from .validate_session_use_case import ValidateSessionUseCase
from .revoke_session_use_case import RevokeSessionUseCase
from .list_sessions_use_case import ListSessionsUseCase, ListAllSessionsUseCase
from .session_stats_use_case import GetSessionStatsUseCase
from .purge_expired_sessions_use_case import PurgeExpiredSessionsUseCase
from .dtos import (
    CreateSessionCommand,
    CreateSessionResponse,
    SessionView,
    SessionStatsResponse,
    RevokeSessionResponse,
    BulkRevokeResponse,
    SessionPage,
    DeviceCount,
    PurgeSessionsResponse,
)

__all__ = [
    "CreateSessionUseCase",
    "ValidateSessionUseCase",
    "RevokeSessionUseCase",
    "ListSessionsUseCase",
    "ListAllSessionsUseCase",
    "GetSessionStatsUseCase",
    "PurgeExpiredSessionsUseCase",
    "CreateSessionCommand",
    "CreateSessionResponse",
    "SessionView",
    "SessionStatsResponse",
    "RevokeSessionResponse",
    "BulkRevokeResponse",
    "SessionPage",
    "DeviceCount",
    "PurgeSessionsResponse",
]
