"""Welcome prompt dispatch for newly joined members."""

from __future__ import annotations

import logging
from collections.abc import Callable

from verification.interfaces.join_store import JoinDeduplicator
from verification.interfaces.messenger import Messenger, SentMessage
from verification.scheduler import DeferredScheduler

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = """Welcome {mention}!

To access the server, please complete the verification process:
{call_to_action}

Verification steps:
1. Login with Discord
2. Authenticate your GitHub account
3. Complete a short technical quiz
4. Get access to the server channels"""


def render_welcome(mention: str, link: str, inline_link: bool) -> str:
    if inline_link:
        call_to_action = f"Click this link to start verification: {link}"
    else:
        call_to_action = "Click the button below to start verification."
    return WELCOME_TEMPLATE.format(mention=mention, call_to_action=call_to_action)


class NotificationService:
    def __init__(
        self,
        deduplicator: JoinDeduplicator,
        messenger: Messenger,
        scheduler: DeferredScheduler,
        channel_id: int,
        link_builder: Callable[[str], str],
        delete_after_seconds: float = 300,
        prompt_style: str = "button",
    ) -> None:
        self._deduplicator = deduplicator
        self._messenger = messenger
        self._scheduler = scheduler
        self._channel_id = channel_id
        self._link_builder = link_builder
        self._delete_after = delete_after_seconds
        self._prompt_style = prompt_style

    async def on_join(self, subject_id: str, mention: str | None = None) -> bool:
        """Send the verification prompt unless one went out recently.

        Returns True when a message was sent.
        """
        if not await self._deduplicator.should_notify(subject_id):
            logger.info("Suppressed duplicate join notification", extra={"subject_id": subject_id})
            return False

        link = self._link_builder(subject_id)
        as_button = self._prompt_style == "button"
        content = render_welcome(mention or f"<@{subject_id}>", link, inline_link=not as_button)

        message = await self._messenger.send_verification_prompt(
            self._channel_id,
            subject_id,
            content,
            link=link if as_button else None,
        )
        self._scheduler.call_later(
            self._delete_after,
            lambda: self._delete(message, subject_id),
            name=f"prompt-cleanup:{subject_id}",
        )
        logger.info("Sent verification prompt", extra={"subject_id": subject_id})
        return True

    async def _delete(self, message: SentMessage, subject_id: str) -> None:
        await message.delete()
        logger.debug("Deleted verification prompt", extra={"subject_id": subject_id})
