"""Component wiring and FastAPI dependency helpers."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from bot.client import GatekeeperBot
from bot.gateway import DiscordMessenger, DiscordRoleGateway
from verification.config import Settings
from verification.interfaces.role_gateway import RoleGateway
from verification.scheduler import DeferredScheduler
from verification.services.notification_service import NotificationService
from verification.services.oauth_service import OAuthExchangeClient, discord_provider, github_provider
from verification.services.verification_service import VerificationService
from verification.stores.memory_store import MemoryJoinDeduplicator, MemoryTokenStore


@dataclass
class VerificationContainer:
    settings: Settings
    scheduler: DeferredScheduler
    token_store: MemoryTokenStore
    join_deduplicator: MemoryJoinDeduplicator
    http_client: httpx.AsyncClient | None
    verification_service: VerificationService
    notification_service: NotificationService | None
    bot: GatekeeperBot | None

    async def aclose(self) -> None:
        await self.scheduler.shutdown()
        if self.http_client is not None:
            await self.http_client.aclose()


def build_container(
    settings: Settings,
    *,
    bot: GatekeeperBot | None = None,
    role_gateway: RoleGateway | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> VerificationContainer:
    """Assemble the process-wide components.

    Without an explicit ``role_gateway`` a Discord bot is created (or the given
    one used) and the gateway, messenger and join handler are bound to it.
    """
    scheduler = DeferredScheduler()
    token_store = MemoryTokenStore(ttl_seconds=settings.TOKEN_TTL_SECONDS)
    deduplicator = MemoryJoinDeduplicator(window_seconds=settings.JOIN_SUPPRESSION_SECONDS, scheduler=scheduler)
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    notifications = None
    if role_gateway is None:
        bot = bot or GatekeeperBot(guild_id=settings.GUILD_ID)
        role_gateway = DiscordRoleGateway(bot)
    if bot is not None:
        notifications = NotificationService(
            deduplicator=deduplicator,
            messenger=DiscordMessenger(bot),
            scheduler=scheduler,
            channel_id=settings.VERIFICATION_CHANNEL_ID,
            link_builder=settings.verification_link,
            delete_after_seconds=settings.PROMPT_DELETE_AFTER_SECONDS,
            prompt_style=settings.PROMPT_STYLE,
        )
        bot.attach(notifications)

    service = VerificationService(
        token_store=token_store,
        oauth_client=OAuthExchangeClient(http_client=http_client, timeout=settings.HTTP_TIMEOUT_SECONDS),
        role_gateway=role_gateway,
        discord=discord_provider(settings),
        github=github_provider(settings),
        guild_id=settings.GUILD_ID,
        role_id=settings.VERIFIED_ROLE_ID,
    )

    return VerificationContainer(
        settings=settings,
        scheduler=scheduler,
        token_store=token_store,
        join_deduplicator=deduplicator,
        http_client=http_client,
        verification_service=service,
        notification_service=notifications,
        bot=bot,
    )


def get_container(request: Request) -> VerificationContainer:
    return request.app.state.container


def get_verification_service(request: Request) -> VerificationService:
    return get_container(request).verification_service
