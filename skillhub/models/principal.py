from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated identity-provider JWT.

    Carried through the request via FastAPI's dependency system and passed
    explicitly into every service call as the caller's account context.

        user_id: stable subject from the identity provider (Account.id)
        name, email, avatar_url: profile claims, used on first sign-in
        roles: platform roles (admin, user)
    """

    user_id: str
    name: str = ""
    email: str = ""
    avatar_url: str = ""
    roles: frozenset[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_platform_admin(self) -> bool:
        return "admin" in self.roles
