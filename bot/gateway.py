"""Discord-backed role grant gateway and messenger."""

from __future__ import annotations

import logging

import discord

from verification.exceptions import GrantFailed, GuildResourceNotFound

logger = logging.getLogger(__name__)


class DiscordRoleGateway:
    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def _resolve_guild(self, guild_id: int) -> discord.Guild:
        guild = self._client.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self._client.fetch_guild(guild_id)
        except (discord.NotFound, discord.Forbidden) as exc:
            raise GuildResourceNotFound("guild", guild_id) from exc

    async def _resolve_member(self, guild: discord.Guild, subject_id: str) -> discord.Member:
        try:
            member_id = int(subject_id)
        except ValueError as exc:
            raise GuildResourceNotFound("member", subject_id) from exc
        try:
            return await guild.fetch_member(member_id)
        except (discord.NotFound, discord.Forbidden) as exc:
            raise GuildResourceNotFound("member", subject_id) from exc

    async def _resolve_role(self, guild: discord.Guild, role_id: int) -> discord.Role:
        role = guild.get_role(role_id)
        if role is not None:
            return role
        # Guilds from fetch_guild carry roles; refresh once for stale caches
        try:
            roles = await guild.fetch_roles()
        except discord.HTTPException as exc:
            raise GuildResourceNotFound("role", role_id) from exc
        role = discord.utils.get(roles, id=role_id)
        if role is None:
            raise GuildResourceNotFound("role", role_id)
        return role

    async def grant(self, guild_id: int, subject_id: str, role_id: int) -> None:
        guild = await self._resolve_guild(guild_id)
        member = await self._resolve_member(guild, subject_id)
        role = await self._resolve_role(guild, role_id)
        try:
            await member.add_roles(role, reason="Completed gatekeeper verification")
        except discord.HTTPException as exc:
            raise GrantFailed(str(exc)) from exc


class DiscordSentMessage:
    def __init__(self, message: discord.Message) -> None:
        self._message = message

    async def delete(self) -> None:
        try:
            await self._message.delete()
        except discord.NotFound:
            logger.debug("Prompt already deleted", extra={"message_id": self._message.id})


class VerificationLinkView(discord.ui.View):
    def __init__(self, link: str) -> None:
        super().__init__(timeout=None)
        self.add_item(discord.ui.Button(label="Start Verification", style=discord.ButtonStyle.link, url=link))


class DiscordMessenger:
    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def _resolve_channel(self, channel_id: int) -> discord.abc.Messageable:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._client.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden) as exc:
                raise GuildResourceNotFound("channel", channel_id) from exc
        if not isinstance(channel, discord.abc.Messageable):
            raise GuildResourceNotFound("channel", channel_id)
        return channel

    async def send_verification_prompt(
        self,
        channel_id: int,
        subject_id: str,
        content: str,
        link: str | None = None,
    ) -> DiscordSentMessage:
        channel = await self._resolve_channel(channel_id)
        kwargs = {
            "content": content,
            "allowed_mentions": discord.AllowedMentions(everyone=False, roles=False, users=[discord.Object(id=int(subject_id))]),
        }
        if link is not None:
            kwargs["view"] = VerificationLinkView(link)
        message = await channel.send(**kwargs)
        return DiscordSentMessage(message)
