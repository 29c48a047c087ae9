"""Domain entity representing the authenticated caller."""

from dataclasses import dataclass

ROLE_CUSTOMER = "customer"
ROLE_AGENT = "agent"
ROLE_SUPER_ADMIN = "super_admin"


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from a bearer token."""

    id: str
    role: str

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the user's role matches ``role``."""

        return self.role.lower() == role.lower()

    def is_super_admin(self) -> bool:
        return self.has_role(ROLE_SUPER_ADMIN)


__all__ = ["CurrentUser", "ROLE_CUSTOMER", "ROLE_AGENT", "ROLE_SUPER_ADMIN"]
