"""Chat messaging interface used by the notification dispatcher."""

from __future__ import annotations

from typing import Protocol


class SentMessage(Protocol):
    async def delete(self) -> None:
        ...


class Messenger(Protocol):
    async def send_verification_prompt(
        self,
        channel_id: int,
        subject_id: str,
        content: str,
        link: str | None = None,
    ) -> SentMessage:
        """Post ``content`` to the channel; ``link`` is rendered as a button when given."""
        ...
