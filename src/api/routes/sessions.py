from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.session_auth import get_current_actor
from src.app.services.revocation_authority import Actor
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    CreateSessionCommand,
    CreateSessionResponse,
    CreateSessionUseCase,
    GetSessionStatsUseCase,
    ListSessionsUseCase,
    RevokeSessionUseCase,
    SessionStatsResponse,
    SessionView,
)
from src.depends import get_clock, get_unit_of_work
from src.domain.entities import MembershipRole

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class CreateSessionRequest(BaseModel):
    """
    Create session payload sent by the login flow after credentials check.

    user_agent and ip_address are the end user's request context, forwarded
    by the login flow.
    """

    principal_id: UUID = Field(..., description="Authenticated user ID")
    tenant_id: Optional[UUID] = Field(
        None, description="Tenant context (absent for platform administrators)"
    )
    role: MembershipRole = Field(..., description="Role verified at login")
    user_agent: Optional[str] = Field(None, max_length=1024)
    ip_address: Optional[str] = Field(None, max_length=64)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateSessionResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def create_session(
    request: CreateSessionRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Create Session

    Internal call from the login flow. Returns the session and the opaque
    token the client must present on every authenticated request.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = CreateSessionCommand(
        principal_id=request.principal_id,
        tenant_id=request.tenant_id,
        role=request.role,
        user_agent=request.user_agent,
        ip_address=request.ip_address,
    )

    use_case = CreateSessionUseCase(
        uow,
        ttl=timedelta(hours=ApplicationConfig.SESSION_TTL_HOURS),
        max_concurrent=ApplicationConfig.SESSION_MAX_CONCURRENT,
        clock=clock,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/mine",
    status_code=status.HTTP_200_OK,
    response_model=List[SessionView],
)
async def list_my_sessions(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    List My Sessions

    Every session of the caller (active, expired and revoked), newest first.
    The session making this request is flagged with is_current.
    """
    use_case = ListSessionsUseCase(uow, clock)
    result = await use_case.execute(actor.principal_id, current_session_id=actor.session_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/mine/stats",
    status_code=status.HTTP_200_OK,
    response_model=SessionStatsResponse,
)
async def my_session_stats(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    My Session Statistics

    Active, expired and revoked counts plus logins in the last 24 hours.
    """
    use_case = GetSessionStatsUseCase(uow, clock)
    result = await use_case.for_principal(actor.principal_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class RevokeSessionRequest(BaseModel):
    """Optional body for a single revocation"""

    reason: Optional[str] = Field(None, max_length=255, description="Why the session is revoked")


class RevokeSessionHttpResponse(BaseModel):
    message: str
    session_id: str
    already_revoked: bool
    is_current: bool


@router.post(
    "/{session_id}/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionHttpResponse,
)
async def revoke_session(
    session_id: UUID,
    request: Optional[RevokeSessionRequest] = None,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Revoke Session

    Idempotent: revoking an already revoked session succeeds.
    is_current tells the client it just revoked its own credential.

    Authorization:
    - Users can revoke their own sessions
    - Admins/owners can revoke sessions within their tenant

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: Session not found
    """
    reason = request.reason if request is not None else None

    use_case = RevokeSessionUseCase(uow, clock=clock)
    result = await use_case.revoke_session(session_id, actor, reason)

    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    data = result.value
    return {
        "message": "Session already revoked" if data.already_revoked else "Session revoked successfully",
        "session_id": data.session_id,
        "already_revoked": data.already_revoked,
        "is_current": data.is_current,
    }


class BulkRevokeHttpResponse(BaseModel):
    message: str
    revoked_count: int


@router.post(
    "/revoke-others",
    status_code=status.HTTP_200_OK,
    response_model=BulkRevokeHttpResponse,
)
async def revoke_other_sessions(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Revoke All Other Sessions

    Logs out every other device of the caller; the current session stays active.
    """
    use_case = RevokeSessionUseCase(uow, clock=clock)
    result = await use_case.revoke_other_sessions(actor)

    if result.is_err():
        error = result.error
        if error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    count = result.value.revoked_count
    return {
        "message": f"Successfully revoked {count} other session(s)",
        "revoked_count": count,
    }


class RevokeAllSessionsRequest(BaseModel):
    """Request to revoke all sessions for a user"""

    principal_id: UUID = Field(..., description="User whose sessions will be revoked")
    reason: Optional[str] = Field(None, max_length=255)


@router.post(
    "/revoke-all",
    status_code=status.HTTP_200_OK,
    response_model=BulkRevokeHttpResponse,
)
async def revoke_all_sessions(
    request: RevokeAllSessionsRequest,
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Revoke All Sessions

    Revokes every active session of a user, e.g. after an account compromise.

    Authorization:
    - Users can revoke their own sessions
    - Admins/owners can revoke a user's sessions within their tenant

    Raises:
        - 403 Forbidden: Insufficient permissions
    """
    use_case = RevokeSessionUseCase(uow, clock=clock)
    result = await use_case.revoke_all_sessions(request.principal_id, actor, request.reason)

    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    count = result.value.revoked_count
    return {
        "message": f"Successfully revoked {count} session(s)",
        "revoked_count": count,
    }
