import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from tests.fakes import make_settings
from verification.config import Settings

REQUIRED_ENV = {
    "DISCORD_BOT_TOKEN": "bot-token",
    "DISCORD_CLIENT_ID": "discord-client",
    "DISCORD_CLIENT_SECRET": "discord-secret",
    "DISCORD_REDIRECT_URI": "https://gate.example.com/callback",
    "GITHUB_CLIENT_ID": "github-client",
    "GITHUB_CLIENT_SECRET": "github-secret",
    "GITHUB_REDIRECT_URI": "https://gate.example.com/callback/github-callback",
    "GUILD_ID": "111",
    "VERIFIED_ROLE_ID": "222",
    "VERIFICATION_CHANNEL_ID": "333",
    "SESSION_SECRET": "session-secret",
    "PUBLIC_BASE_URL": "https://gate.example.com",
}


class TestSettings(unittest.TestCase):
    def test_loads_from_environment_with_defaults(self):
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.GUILD_ID, 111)
        self.assertEqual(settings.PORT, 3000)
        self.assertEqual(settings.TOKEN_TTL_SECONDS, 600)
        self.assertEqual(settings.JOIN_SUPPRESSION_SECONDS, 60)
        self.assertEqual(settings.PROMPT_DELETE_AFTER_SECONDS, 300)
        self.assertEqual(settings.PROMPT_STYLE, "button")

    def test_missing_required_value_fails(self):
        env = {k: v for k, v in REQUIRED_ENV.items() if k != "VERIFIED_ROLE_ID"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError) as ctx:
                Settings(_env_file=None)

        self.assertIn("VERIFIED_ROLE_ID", str(ctx.exception))

    def test_legacy_redirect_uri_name(self):
        env = {k: v for k, v in REQUIRED_ENV.items() if k != "DISCORD_REDIRECT_URI"}
        env["REDIRECT_URI"] = "https://legacy.example.com/callback"
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.DISCORD_REDIRECT_URI, "https://legacy.example.com/callback")

    def test_non_numeric_guild_id_fails(self):
        with self.assertRaises(ValidationError):
            make_settings(GUILD_ID="not-a-snowflake")

    def test_blank_secret_fails(self):
        with self.assertRaises(ValidationError):
            make_settings(SESSION_SECRET="  ")

    def test_blank_client_ids_and_redirects_fail(self):
        for field in (
            "DISCORD_CLIENT_ID",
            "GITHUB_CLIENT_ID",
            "DISCORD_REDIRECT_URI",
            "GITHUB_REDIRECT_URI",
            "PUBLIC_BASE_URL",
        ):
            with self.assertRaises(ValidationError) as ctx:
                make_settings(**{field: ""})
            self.assertIn(field, str(ctx.exception))

    def test_copied_env_template_fails(self):
        env = dict(REQUIRED_ENV, DISCORD_CLIENT_ID="", GITHUB_CLIENT_ID="")
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_unknown_prompt_style_fails(self):
        with self.assertRaises(ValidationError):
            make_settings(PROMPT_STYLE="embed")

    def test_verification_link(self):
        settings = make_settings(PUBLIC_BASE_URL="https://gate.example.com/")

        self.assertEqual(settings.PUBLIC_BASE_URL, "https://gate.example.com")
        self.assertEqual(settings.verification_link("U1"), "https://gate.example.com/verify/U1")


if __name__ == "__main__":
    unittest.main()
