from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from ..core.enums import ADMIN_ROLES, Role


@dataclass(frozen=True)
class Actor:
    """Who is performing a mutation. Passed explicitly; there is no session context."""

    user_id: str
    role: Role


class AuthorizationPort(Protocol):
    def can_bind(self, actor: Optional[Actor], target_id: str, day: Optional[date]) -> bool:
        raise NotImplementedError

    def can_manage_templates(self, actor: Optional[Actor]) -> bool:
        raise NotImplementedError

    def can_edit_timetable(self, actor: Optional[Actor], timetable_id: Optional[str]) -> bool:
        raise NotImplementedError


class AllowAllPolicy(AuthorizationPort):
    """No enforcement; used by tooling and tests that do not exercise authority."""

    def can_bind(self, actor, target_id, day) -> bool:
        return True

    def can_manage_templates(self, actor) -> bool:
        return True

    def can_edit_timetable(self, actor, timetable_id) -> bool:
        return True


class RolePolicy(AuthorizationPort):
    """Administrators may mutate scheduling state; everyone else reads only."""

    def __init__(self, admin_roles=ADMIN_ROLES):
        self._admin_roles = frozenset(admin_roles)

    def _is_admin(self, actor: Optional[Actor]) -> bool:
        return actor is not None and actor.role in self._admin_roles

    def can_bind(self, actor, target_id, day) -> bool:
        return self._is_admin(actor)

    def can_manage_templates(self, actor) -> bool:
        return self._is_admin(actor)

    def can_edit_timetable(self, actor, timetable_id) -> bool:
        return self._is_admin(actor)
