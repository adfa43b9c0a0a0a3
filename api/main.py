"""
FastAPI application for the guild gatekeeper.

Serves the verification flow over HTTP and runs the Discord gateway client on
the same event loop.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from api.handler import register_exception_handlers
from api.verification import router as verification_router
from verification.config import Settings, get_settings
from verification.dependencies import VerificationContainer, build_container

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _log_bot_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Discord gateway client stopped: %s", exc, exc_info=exc)


def create_app(
    settings: Settings | None = None,
    container: VerificationContainer | None = None,
    start_bot: bool = True,
) -> FastAPI:
    """Build the application; settings are validated here so missing config fails at startup."""
    settings = settings or (container.settings if container else get_settings())
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown."""
        bot_task: asyncio.Task | None = None
        if start_bot and container.bot is not None:
            logger.info("Starting Discord gateway client...")
            bot_task = asyncio.create_task(container.bot.start(settings.DISCORD_BOT_TOKEN))
            bot_task.add_done_callback(_log_bot_exit)

        yield

        logger.info("Shutting down gatekeeper...")
        if container.bot is not None and not container.bot.is_closed():
            await container.bot.close()
        if bot_task is not None:
            await asyncio.gather(bot_task, return_exceptions=True)
        await container.aclose()

    app = FastAPI(
        title="Guild Gatekeeper",
        description="Discord + GitHub + quiz verification for guild access",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET, max_age=settings.TOKEN_TTL_SECONDS)

    register_exception_handlers(app)

    app.include_router(verification_router, tags=["verification"])
    return app


def run() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
