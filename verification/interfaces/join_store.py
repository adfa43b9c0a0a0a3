"""Join suppression interface."""

from __future__ import annotations

from typing import Protocol


class JoinDeduplicator(Protocol):
    async def is_marked(self, subject_id: str) -> bool:
        ...

    async def mark(self, subject_id: str) -> None:
        ...

    async def should_notify(self, subject_id: str) -> bool:
        ...
