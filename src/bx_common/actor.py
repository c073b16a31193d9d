"""Authenticated actor as supplied by the identity provider."""

from dataclasses import dataclass

from src.bx_common.enums import ActorRole


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role is ActorRole.ADMIN
