"""
Revocation Authority

Decides who may revoke which session.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.entities import MembershipRole, Session

ELEVATED_ROLES = frozenset(
    {
        MembershipRole.super_admin.value,
        MembershipRole.owner.value,
        MembershipRole.admin.value,
    }
)


class Actor(BaseModel):
    """Verified identity performing an operation"""

    model_config = ConfigDict(frozen=True)

    principal_id: UUID
    tenant_id: Optional[UUID] = None
    role: str
    session_id: Optional[UUID] = None

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    @property
    def is_platform_level(self) -> bool:
        return self.role == MembershipRole.super_admin.value and self.tenant_id is None


class RevocationAuthority:
    """
    Authorization rules for revocation.

    Business Rules:
    - Self-service: a principal may revoke any of their own sessions
    - Elevated roles (owner, admin) may revoke any session in their tenant
    - Platform-level actors (super_admin, no tenant) may revoke any session
    - A tenant-less owner/admin only keeps self-service rights
    """

    def can_revoke(self, actor: Actor, session: Session) -> bool:
        if session.principal_id == actor.principal_id:
            return True
        return self.can_manage(actor, session.tenant_id)

    def can_manage(self, actor: Actor, tenant_id: Optional[UUID]) -> bool:
        """Whether actor holds administrative rights over a tenant scope"""
        if not actor.is_elevated:
            return False
        if actor.is_platform_level:
            return True
        return tenant_id is not None and tenant_id == actor.tenant_id
