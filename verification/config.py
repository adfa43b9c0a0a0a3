"""Gatekeeper configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Discord bot + OAuth (Provider A)
    DISCORD_BOT_TOKEN: str = Field(description="Bot token used for the gateway connection")
    DISCORD_CLIENT_ID: str = Field(description="Discord OAuth client id")
    DISCORD_CLIENT_SECRET: str = Field(description="Discord OAuth client secret")
    DISCORD_REDIRECT_URI: str = Field(
        validation_alias=AliasChoices("DISCORD_REDIRECT_URI", "REDIRECT_URI"),
        description="Redirect URI registered for the Discord OAuth app (/callback)",
    )

    # GitHub OAuth (Provider B)
    GITHUB_CLIENT_ID: str = Field(description="GitHub OAuth client id")
    GITHUB_CLIENT_SECRET: str = Field(description="GitHub OAuth client secret")
    GITHUB_REDIRECT_URI: str = Field(description="Redirect URI for GitHub (/callback/github-callback)")

    # Guild resources
    GUILD_ID: int = Field(description="Guild the gatekeeper protects")
    VERIFIED_ROLE_ID: int = Field(description="Role granted after verification")
    VERIFICATION_CHANNEL_ID: int = Field(description="Channel receiving welcome prompts")

    SESSION_SECRET: str = Field(description="Secret key for signing the browser session cookie")
    PUBLIC_BASE_URL: str = Field(description="Browser-facing base URL used in verification links")

    HOST: str = Field(default="0.0.0.0", description="Listen address")
    PORT: int = Field(default=3000, description="Listen port")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    TOKEN_TTL_SECONDS: int = Field(default=600, gt=0, description="Lifetime of a verification token")
    JOIN_SUPPRESSION_SECONDS: int = Field(default=60, gt=0, description="Window collapsing duplicate join events")
    PROMPT_DELETE_AFTER_SECONDS: int = Field(default=300, gt=0, description="Delay before a welcome prompt is deleted")
    PROMPT_STYLE: Literal["button", "text"] = Field(default="button", description="Link button or inline link")
    HTTP_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0, description="Timeout for OAuth provider calls")

    @field_validator("PUBLIC_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator(
        "DISCORD_BOT_TOKEN",
        "DISCORD_CLIENT_ID",
        "DISCORD_CLIENT_SECRET",
        "DISCORD_REDIRECT_URI",
        "GITHUB_CLIENT_ID",
        "GITHUB_CLIENT_SECRET",
        "GITHUB_REDIRECT_URI",
        "SESSION_SECRET",
        "PUBLIC_BASE_URL",
    )
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    def verification_link(self, subject_id: str) -> str:
        return f"{self.PUBLIC_BASE_URL}/verify/{subject_id}"


@lru_cache
def get_settings() -> Settings:
    """Load settings once; raises ``ValidationError`` when required values are missing."""
    return Settings()
