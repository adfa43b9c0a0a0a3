"""Shared test doubles."""

from __future__ import annotations

from verification.config import Settings


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingRoleGateway:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[int, str, int]] = []
        self.error = error

    async def grant(self, guild_id: int, subject_id: str, role_id: int) -> None:
        self.calls.append((guild_id, subject_id, role_id))
        if self.error is not None:
            raise self.error


class FakeMessage:
    def __init__(self, content: str, link: str | None) -> None:
        self.content = content
        self.link = link
        self.deleted = False

    async def delete(self) -> None:
        self.deleted = True


class RecordingMessenger:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str, FakeMessage]] = []

    async def send_verification_prompt(self, channel_id, subject_id, content, link=None):
        message = FakeMessage(content, link)
        self.sent.append((channel_id, subject_id, message))
        return message


class RecordingScheduler:
    """Captures deferred callbacks so tests can fire them explicitly."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[float, object, str]] = []

    def call_later(self, delay, callback, name="deferred"):
        self.scheduled.append((delay, callback, name))

    async def run_all(self) -> None:
        pending, self.scheduled = self.scheduled, []
        for _, callback, _ in pending:
            await callback()


def make_settings(**overrides) -> Settings:
    values = {
        "DISCORD_BOT_TOKEN": "bot-token",
        "DISCORD_CLIENT_ID": "discord-client",
        "DISCORD_CLIENT_SECRET": "discord-secret",
        "DISCORD_REDIRECT_URI": "https://gate.example.com/callback",
        "GITHUB_CLIENT_ID": "github-client",
        "GITHUB_CLIENT_SECRET": "github-secret",
        "GITHUB_REDIRECT_URI": "https://gate.example.com/callback/github-callback",
        "GUILD_ID": 111,
        "VERIFIED_ROLE_ID": 222,
        "VERIFICATION_CHANNEL_ID": 333,
        "SESSION_SECRET": "session-secret",
        "PUBLIC_BASE_URL": "https://gate.example.com/",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
