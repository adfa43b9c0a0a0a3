"""Verification token store interface."""

from __future__ import annotations

from typing import Protocol

from verification.schemas import Stage, VerificationToken


class TokenStore(Protocol):
    async def issue(self, subject_id: str) -> VerificationToken:
        ...

    async def validate(self, token: str, stage: Stage | None = None) -> VerificationToken | None:
        ...

    async def advance(self, token: str, from_stage: Stage, to_stage: Stage) -> VerificationToken | None:
        ...

    async def invalidate(self, token: str) -> None:
        ...

    async def discard_subject(self, subject_id: str, stage: Stage | None = None) -> int:
        ...
