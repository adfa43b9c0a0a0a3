"""Verification API routes."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from verification.dependencies import get_verification_service
from verification.exceptions import InvalidOrExpiredRequest
from verification.schemas import ApiResponse, HealthResponse, QuizSubmission
from verification.services.verification_service import VerificationService

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()

SESSION_STATE_KEY = "verification_state"


def _check_session_state(request: Request, state: str | None) -> None:
    # A browser that started a different attempt must not complete this one
    issued = request.session.get(SESSION_STATE_KEY)
    if issued and state and issued != state:
        logger.warning("Callback state does not match session", extra={"token_present": True})
        raise InvalidOrExpiredRequest()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/verify/{subject_id}")
async def verify(
    subject_id: str,
    request: Request,
    service: VerificationService = Depends(get_verification_service),
) -> RedirectResponse:
    redirect = await service.start(subject_id)
    request.session[SESSION_STATE_KEY] = redirect.state
    return RedirectResponse(url=redirect.url, status_code=status.HTTP_302_FOUND)


@router.get("/callback")
async def discord_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    service: VerificationService = Depends(get_verification_service),
) -> RedirectResponse:
    _check_session_state(request, state)
    redirect = await service.complete_discord(code, state)
    return RedirectResponse(url=redirect.url, status_code=status.HTTP_302_FOUND)


@router.get("/callback/github-callback", response_class=HTMLResponse)
async def github_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    service: VerificationService = Depends(get_verification_service),
) -> HTMLResponse:
    _check_session_state(request, state)
    quiz = await service.complete_github(code, state)
    return templates.TemplateResponse(
        request,
        "quiz.html",
        {
            "subject_id": quiz.subject_id,
            "questions": quiz.client_questions(),
            "passing_score": quiz.passing_score,
        },
    )


@router.post("/submit-quiz", response_model=ApiResponse)
async def submit_quiz(
    submission: QuizSubmission,
    request: Request,
    service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    request.session.pop(SESSION_STATE_KEY, None)
    outcome = await service.submit_quiz(submission)
    return ApiResponse(
        success=True,
        message="Verification successful",
        data={"subject_id": outcome.subject_id, "correct_count": outcome.correct_count},
    )


@router.get("/success", response_class=HTMLResponse)
async def success(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "success.html", {})


@router.get("/failure", response_class=HTMLResponse)
async def failure(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "failure.html", {})
