"""In-memory verification stores.

State lives only in this process; a restart drops every pending attempt and the
user simply requests a fresh link.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
import time
from collections.abc import Callable

from verification.scheduler import DeferredScheduler
from verification.schemas import Stage, VerificationToken

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
TOKEN_HALF_LENGTH = 20

Clock = Callable[[], float]


def generate_token() -> str:
    """Two independent base-36 halves, concatenated."""
    first = "".join(secrets.choice(_BASE36) for _ in range(TOKEN_HALF_LENGTH))
    second = "".join(secrets.choice(_BASE36) for _ in range(TOKEN_HALF_LENGTH))
    return first + second


class MemoryTokenStore:
    def __init__(self, ttl_seconds: int = 600, clock: Clock = time.time) -> None:
        self._lock = asyncio.Lock()
        self._tokens: dict[str, VerificationToken] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._tokens)

    def _expired(self, record: VerificationToken, now: float) -> bool:
        return (now - record.issued_at) > self._ttl

    def _live(self, token: str, now: float) -> VerificationToken | None:
        record = self._tokens.get(token)
        if record is None:
            return None
        if self._expired(record, now):
            del self._tokens[token]
            return None
        return record

    def _purge_expired(self, now: float) -> None:
        stale = [key for key, record in self._tokens.items() if self._expired(record, now)]
        for key in stale:
            del self._tokens[key]
        if stale:
            logger.debug("Purged %d expired verification tokens", len(stale))

    async def issue(self, subject_id: str) -> VerificationToken:
        async with self._lock:
            now = self._clock()
            self._purge_expired(now)
            token = generate_token()
            while token in self._tokens:
                token = generate_token()
            record = VerificationToken(
                token=token,
                subject_id=subject_id,
                issued_at=now,
                stage=Stage.AWAITING_PROVIDER_A,
            )
            self._tokens[token] = record
            return record

    async def validate(self, token: str, stage: Stage | None = None) -> VerificationToken | None:
        async with self._lock:
            record = self._live(token, self._clock())
            if record is None:
                return None
            if stage is not None and record.stage != stage:
                return None
            return record

    async def advance(self, token: str, from_stage: Stage, to_stage: Stage) -> VerificationToken | None:
        async with self._lock:
            record = self._live(token, self._clock())
            if record is None or record.stage != from_stage:
                return None
            updated = record.model_copy(update={"stage": to_stage})
            self._tokens[token] = updated
            return updated

    async def invalidate(self, token: str) -> None:
        async with self._lock:
            self._tokens.pop(token, None)

    async def discard_subject(self, subject_id: str, stage: Stage | None = None) -> int:
        async with self._lock:
            keys = [
                key
                for key, record in self._tokens.items()
                if record.subject_id == subject_id and (stage is None or record.stage == stage)
            ]
            for key in keys:
                del self._tokens[key]
            return len(keys)


class MemoryJoinDeduplicator:
    """Collapses repeated join events for one subject inside a trailing window."""

    def __init__(
        self,
        window_seconds: int = 60,
        clock: Clock = time.monotonic,
        scheduler: DeferredScheduler | None = None,
    ) -> None:
        self._lock = asyncio.Lock()
        self._marked: dict[str, float] = {}
        self._window = window_seconds
        self._clock = clock
        self._scheduler = scheduler

    def _is_marked(self, subject_id: str, now: float) -> bool:
        marked_at = self._marked.get(subject_id)
        if marked_at is None:
            return False
        if (now - marked_at) >= self._window:
            del self._marked[subject_id]
            return False
        return True

    def _mark(self, subject_id: str, now: float) -> None:
        self._marked[subject_id] = now
        if self._scheduler is not None:
            self._scheduler.call_later(
                self._window,
                lambda: self._evict(subject_id, now),
                name=f"join-suppression:{subject_id}",
            )

    async def _evict(self, subject_id: str, marked_at: float) -> None:
        async with self._lock:
            # A later mark owns its own eviction
            if self._marked.get(subject_id) == marked_at:
                del self._marked[subject_id]

    async def is_marked(self, subject_id: str) -> bool:
        async with self._lock:
            return self._is_marked(subject_id, self._clock())

    async def mark(self, subject_id: str) -> None:
        async with self._lock:
            self._mark(subject_id, self._clock())

    async def should_notify(self, subject_id: str) -> bool:
        async with self._lock:
            now = self._clock()
            if self._is_marked(subject_id, now):
                return False
            self._mark(subject_id, now)
            return True
