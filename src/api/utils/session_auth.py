"""
Session Authentication

Every authenticated route depends on get_current_actor, which validates the
presented session token exactly once per request.
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import ApplicationConfig
from src.api.error import NotAuthenticatedError
from src.app.services.revocation_authority import Actor
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import ValidateSessionUseCase
from src.depends import get_clock, get_unit_of_work
from src.domain.entities import Session

SESSION_TOKEN_HEADER = "X-Session-Token"

bearer = HTTPBearer(auto_error=False)


def extract_session_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Token from Bearer header, X-Session-Token header, or the session cookie"""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    header_token = request.headers.get(SESSION_TOKEN_HEADER)
    if header_token:
        return header_token
    return request.cookies.get(ApplicationConfig.SESSION_COOKIE_NAME)


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Session:
    """
    Dependency that validates the session token and records activity.

    Raises:
        NotAuthenticatedError: 401 for any invalid token
    """
    token = extract_session_token(request, credentials)
    result = await ValidateSessionUseCase(uow, clock).execute(token)

    if result.is_err():
        raise NotAuthenticatedError()

    return result.value


async def get_current_actor(session: Session = Depends(get_current_session)) -> Actor:
    return Actor(
        principal_id=session.principal_id,
        tenant_id=session.tenant_id,
        role=session.role,
        session_id=session.id,
    )
