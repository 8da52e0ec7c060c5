# smartbazaar/identity.py
"""Caller identity as handed over by the upstream auth provider.

The provider has already verified the user; all we receive is an opaque user
id and a role claim.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import Unauthorized

FARMER = "farmer"
BUYER = "buyer"
SYSTEM = "system"
ROLES = (FARMER, BUYER, SYSTEM)


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str

    @property
    def is_system(self) -> bool:
        return self.role == SYSTEM


def actor_from_claims(user_id: Optional[str], role: Optional[str]) -> Actor:
    user_id = (user_id or "").strip()
    role = (role or "").strip().lower()
    if not user_id:
        raise Unauthorized("missing user id")
    if role not in ROLES:
        raise Unauthorized(f"unknown role {role!r}")
    return Actor(user_id=user_id, role=role)
