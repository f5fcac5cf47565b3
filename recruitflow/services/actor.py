"""
The acting user, passed explicitly into every service call.

Routes build an ``Actor`` from the Flask-Login session; services never
read ``current_user`` themselves.  Role and identity therefore can't be
supplied (or spoofed) through a request body.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """Identity and role of whoever is making the request."""

    user_id: int
    role: str
    department: str | None = None
    name: str = ""

    @classmethod
    def from_user(cls, user) -> "Actor":
        """Build an Actor from a ``User`` model instance."""
        return cls(
            user_id=user.id,
            role=user.role,
            department=user.department,
            name=user.full_name,
        )

    def has_role(self, *role_names: str) -> bool:
        return self.role in role_names
