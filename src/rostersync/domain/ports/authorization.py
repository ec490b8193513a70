"""Authorization port consulted before any write."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class AdminAuthorizer(Protocol):
    """Answer whether an operator holds the administrator role."""

    def is_admin(self, operator_id: UUID) -> bool: ...
