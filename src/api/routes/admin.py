"""
Admin API Routes - Platform Session Administration

Read endpoints require a platform-level session (super_admin without tenant).
The retention purge is an internal endpoint authenticated via Admin API Key.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.session_auth import get_current_actor
from src.app.services.revocation_authority import Actor
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    DeviceCount,
    GetSessionStatsUseCase,
    ListAllSessionsUseCase,
    PurgeExpiredSessionsUseCase,
    PurgeSessionsResponse,
    SessionPage,
    SessionStatsResponse,
)
from src.depends import get_clock, get_unit_of_work
from src.domain.entities import SessionStatus

router = APIRouter(prefix="/admin", tags=["Admin"])


def _raise_for(error):
    if error.code == "FORBIDDEN":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    raise ServerError(error)


@router.get(
    "/sessions",
    status_code=status.HTTP_200_OK,
    response_model=SessionPage,
)
async def list_all_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    principal_id: Optional[UUID] = Query(None),
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    List All Sessions

    Paginated platform-wide listing, newest first, filterable by user and status.

    Raises:
        - 403 Forbidden: Caller is not a platform administrator
    """
    use_case = ListAllSessionsUseCase(uow, clock)
    result = await use_case.execute(
        actor, page=page, limit=limit, principal_id=principal_id, status=session_status
    )

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.get(
    "/sessions/stats",
    status_code=status.HTTP_200_OK,
    response_model=SessionStatsResponse,
)
async def platform_session_stats(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Platform Session Statistics

    Raises:
        - 403 Forbidden: Caller is not a platform administrator
    """
    use_case = GetSessionStatsUseCase(uow, clock)
    result = await use_case.for_platform(actor)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.get(
    "/sessions/devices",
    status_code=status.HTTP_200_OK,
    response_model=List[DeviceCount],
)
async def sessions_by_device(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Active Sessions by Device Type

    Raises:
        - 403 Forbidden: Caller is not a platform administrator
    """
    use_case = GetSessionStatsUseCase(uow, clock)
    result = await use_case.by_device(actor)

    if result.is_err():
        _raise_for(result.error)

    return result.value


@router.post(
    "/sessions/purge",
    status_code=status.HTTP_200_OK,
    response_model=PurgeSessionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def purge_expired_sessions(
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Purge Expired Sessions

    Deletes sessions that expired more than SESSION_RETENTION_DAYS ago.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
    """
    use_case = PurgeExpiredSessionsUseCase(
        uow,
        retention=timedelta(days=ApplicationConfig.SESSION_RETENTION_DAYS),
        clock=clock,
    )
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
