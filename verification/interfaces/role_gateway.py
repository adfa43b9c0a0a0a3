"""Role grant gateway interface."""

from __future__ import annotations

from typing import Protocol


class RoleGateway(Protocol):
    async def grant(self, guild_id: int, subject_id: str, role_id: int) -> None:
        """Apply ``role_id`` to the member.

        Raises ``GuildResourceNotFound`` or ``GrantFailed``.
        """
        ...
