"""Discord gateway client: watches joins and hosts the role gateway."""

from __future__ import annotations

import logging

import discord

from verification.exceptions import VerificationException
from verification.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def default_intents() -> discord.Intents:
    intents = discord.Intents.none()
    intents.guilds = True
    intents.members = True
    intents.guild_messages = True
    return intents


class GatekeeperBot(discord.Client):
    def __init__(self, guild_id: int, intents: discord.Intents | None = None) -> None:
        super().__init__(intents=intents or default_intents())
        self.guild_id = guild_id
        self.notifications: NotificationService | None = None

    def attach(self, notifications: NotificationService) -> None:
        self.notifications = notifications

    async def on_ready(self) -> None:
        logger.info("Logged in as %s", self.user)

    async def on_member_join(self, member: discord.Member) -> None:
        if member.bot or member.guild.id != self.guild_id:
            return
        if self.notifications is None:
            logger.warning("Join received before notifications were attached", extra={"subject_id": str(member.id)})
            return
        try:
            await self.notifications.on_join(str(member.id), mention=member.mention)
        except VerificationException as exc:
            logger.error(
                "Could not send verification prompt: %s",
                exc.message,
                extra={"subject_id": str(member.id), **exc.data},
            )
        except discord.HTTPException:
            logger.exception("Discord rejected verification prompt", extra={"subject_id": str(member.id)})
