"""Explicit authorization context passed into service calls."""
from __future__ import annotations

from dataclasses import dataclass, field

from django.core.exceptions import PermissionDenied

ROLE_ADMIN = "Admin"
ROLE_PROFESSOR = "Professor"
ROLE_STUDENT = "Student"
ROLE_PARENT = "Parent"


@dataclass(frozen=True)
class AuthContext:
    """Who is calling: the user id, its roles and the entity the account is linked to."""

    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    linked_entity_id: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "roles", frozenset(role.lower() for role in self.roles))

    def has_role(self, role: str) -> bool:
        return role.lower() in self.roles

    def has_any_role(self, *roles: str) -> bool:
        return any(self.has_role(role) for role in roles)


def require_role(auth: AuthContext | None, *roles: str, action: str = "执行此操作") -> None:
    if auth is None or not auth.has_any_role(*roles):
        raise PermissionDenied(f"权限不足，无法{action}。")
