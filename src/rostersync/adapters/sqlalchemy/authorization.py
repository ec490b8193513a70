"""Admin checks answered from the role assignment table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rostersync.domain.model import AccessRole

from .repositories import SqlAlchemyRoleRepository

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.orm import Session


class SqlAlchemyAdminAuthorizer:
    def __init__(self, session: Session) -> None:
        self.roles = SqlAlchemyRoleRepository(session)

    def is_admin(self, operator_id: UUID) -> bool:
        return self.roles.has_role(operator_id, AccessRole.ADMIN)
