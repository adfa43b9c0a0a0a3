"""Verification exceptions."""

from __future__ import annotations


class VerificationException(Exception):
    """Base verification exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400, data: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data or {}


class InvalidOrExpiredRequest(VerificationException):
    def __init__(self, message: str = "Invalid or expired verification request"):
        super().__init__(message, status_code=400)


class IdentityMismatch(VerificationException):
    def __init__(self, message: str = "Discord account verification failed"):
        super().__init__(message, status_code=400)


class ProviderExchangeError(VerificationException):
    """Network, HTTP or payload failure against an OAuth provider."""

    def __init__(self, provider: str, status: int | None = None, message: str = "Authentication failed"):
        super().__init__(message, status_code=500, data={"provider": provider, "status": status})
        self.provider = provider
        self.status = status


class QuizFailed(VerificationException):
    def __init__(self, correct_count: int, required: int):
        super().__init__(
            "Quiz not passed",
            status_code=400,
            data={"correct_count": correct_count, "required": required},
        )
        self.correct_count = correct_count
        self.required = required


class GuildResourceNotFound(VerificationException):
    """Guild, member, role or channel lookup failure."""

    def __init__(self, kind: str, resource_id: int | str | None = None):
        super().__init__(
            f"Verified {kind} not found" if kind == "role" else f"{kind.capitalize()} not found",
            status_code=500,
            data={"kind": kind, "id": str(resource_id) if resource_id is not None else None},
        )
        self.kind = kind
        self.resource_id = resource_id


class GrantFailed(VerificationException):
    def __init__(self, cause: str):
        super().__init__("Verification failed", status_code=500, data={"cause": cause})
        self.cause = cause
