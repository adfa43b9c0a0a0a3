"""Verification state machine.

One token threads both OAuth hops; its stage moves forward only through
``advance`` so a replayed callback finds the token already past its stage:

    AWAITING_PROVIDER_A --discord--> AWAITING_PROVIDER_B --github--> QUIZ --> PASSED | FAILED
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from verification.exceptions import (
    IdentityMismatch,
    InvalidOrExpiredRequest,
    ProviderExchangeError,
    QuizFailed,
    VerificationException,
)
from verification.interfaces.role_gateway import RoleGateway
from verification.interfaces.token_store import TokenStore
from verification.quiz import PASSING_SCORE, QUIZ_QUESTIONS, has_passed, score_answers
from verification.schemas import (
    QuizQuestion,
    QuizSubmission,
    QuizView,
    Stage,
    VerificationOutcome,
    VerificationRedirect,
    VerificationToken,
)
from verification.services.oauth_service import OAuthExchangeClient, OAuthProvider

logger = logging.getLogger(__name__)


class VerificationService:
    def __init__(
        self,
        token_store: TokenStore,
        oauth_client: OAuthExchangeClient,
        role_gateway: RoleGateway,
        discord: OAuthProvider,
        github: OAuthProvider,
        guild_id: int,
        role_id: int,
        questions: Sequence[QuizQuestion] = QUIZ_QUESTIONS,
        passing_score: int = PASSING_SCORE,
    ) -> None:
        self._tokens = token_store
        self._oauth = oauth_client
        self._roles = role_gateway
        self._discord = discord
        self._github = github
        self._guild_id = guild_id
        self._role_id = role_id
        self._questions = list(questions)
        self._passing_score = passing_score

    async def _require(self, state: str | None, stage: Stage, provider: str) -> VerificationToken:
        record = await self._tokens.validate(state, stage) if state else None
        if record is None:
            logger.warning(
                "Rejected %s callback: unknown, expired or replayed state",
                provider,
                extra={"provider": provider, "token_present": bool(state)},
            )
            raise InvalidOrExpiredRequest()
        return record

    async def _fail(self, record: VerificationToken, exc: VerificationException) -> None:
        await self._tokens.invalidate(record.token)
        logger.warning(
            "Verification failed for subject %s: %s",
            record.subject_id,
            exc.message,
            extra={"subject_id": record.subject_id, "stage": record.stage.value, **exc.data},
        )

    async def start(self, subject_id: str) -> VerificationRedirect:
        record = await self._tokens.issue(subject_id)
        logger.info("Issued verification token", extra={"subject_id": subject_id})
        return VerificationRedirect(
            url=self._oauth.authorization_url(self._discord, record.token),
            state=record.token,
        )

    async def complete_discord(self, code: str | None, state: str | None) -> VerificationRedirect:
        record = await self._require(state, Stage.AWAITING_PROVIDER_A, self._discord.name)
        if not code:
            exc = InvalidOrExpiredRequest()
            await self._fail(record, exc)
            raise exc

        try:
            access_token = await self._oauth.exchange_code(self._discord, code, self._discord.redirect_uri)
            profile = await self._oauth.fetch_profile(self._discord, access_token)
        except ProviderExchangeError as exc:
            await self._fail(record, exc)
            raise

        if profile.id != record.subject_id:
            exc = IdentityMismatch()
            await self._fail(record, exc)
            raise exc

        advanced = await self._tokens.advance(record.token, Stage.AWAITING_PROVIDER_A, Stage.AWAITING_PROVIDER_B)
        if advanced is None:
            # Lost a race with a concurrent callback carrying the same state
            raise InvalidOrExpiredRequest()

        logger.info("Discord identity confirmed", extra={"subject_id": record.subject_id})
        return VerificationRedirect(
            url=self._oauth.authorization_url(self._github, advanced.token),
            state=advanced.token,
        )

    async def complete_github(self, code: str | None, state: str | None) -> QuizView:
        record = await self._require(state, Stage.AWAITING_PROVIDER_B, self._github.name)
        if not code:
            exc = InvalidOrExpiredRequest()
            await self._fail(record, exc)
            raise exc

        try:
            # The GitHub identity itself is not checked; only the exchange must succeed
            await self._oauth.exchange_code(self._github, code, self._github.redirect_uri, state=record.token)
        except ProviderExchangeError as exc:
            await self._fail(record, exc)
            raise

        advanced = await self._tokens.advance(record.token, Stage.AWAITING_PROVIDER_B, Stage.QUIZ)
        if advanced is None:
            raise InvalidOrExpiredRequest()

        logger.info("GitHub account linked, quiz issued", extra={"subject_id": record.subject_id})
        return QuizView(
            subject_id=advanced.subject_id,
            questions=self._questions,
            passing_score=self._passing_score,
        )

    async def submit_quiz(self, submission: QuizSubmission) -> VerificationOutcome:
        """Score a submission and grant the role on a pass.

        The reported count is trusted unless per-question ``answers`` are sent.
        Repeated passing submissions each trigger a grant.
        """
        if submission.answers is not None:
            correct_count = score_answers(submission.answers, self._questions)
        else:
            correct_count = max(submission.correct_count or 0, 0)

        subject_id = submission.subject_id
        # Only attempts that reached the quiz end here; earlier stages stay live
        await self._tokens.discard_subject(subject_id, stage=Stage.QUIZ)

        if not has_passed(correct_count, self._passing_score):
            logger.info(
                "Quiz failed",
                extra={"subject_id": subject_id, "correct_count": correct_count},
            )
            raise QuizFailed(correct_count, self._passing_score)

        try:
            await self._roles.grant(self._guild_id, subject_id, self._role_id)
        except VerificationException as exc:
            logger.error(
                "Role grant failed for subject %s: %s",
                subject_id,
                exc.message,
                extra={"subject_id": subject_id, **exc.data},
            )
            raise

        logger.info("Verification passed, role granted", extra={"subject_id": subject_id})
        return VerificationOutcome(subject_id=subject_id, stage=Stage.PASSED, correct_count=correct_count)
