"""
Client configuration.

Read from environment variables (a .env file in the working directory is
loaded first):

    DLSecret            — Direct Line secret of the bot (required)
    DL_SPEC_URL         — URL of the Direct Line Swagger document
    DL_USER_ID          — id/name used for outgoing messages
    DL_PROMPT           — input prompt
    DL_REQUEST_TIMEOUT  — HTTP timeout in seconds (unset = no timeout)
    LOG_LEVEL           — console log level (default INFO)
    DL_LOG_FILE         — optional debug log file
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from dlclient.errors import ConfigurationError, MissingSecretError


DEFAULT_SPEC_URL = "https://docs.botframework.com/en-us/restapi/directline3/swagger.json"
DEFAULT_USER_ID = "DirectLineClient"
DEFAULT_PROMPT = "Command> "

SECRET_ENV = "DLSecret"


@dataclass(frozen=True)
class ClientConfig:
    """Console client configuration."""

    secret: str

    # Remote API
    spec_url: str = DEFAULT_SPEC_URL
    request_timeout: float | None = None   # None = wait forever

    # Identity used for sent messages and echo suppression
    user_id: str = DEFAULT_USER_ID

    # Console
    prompt: str = DEFAULT_PROMPT
    card_width: int = 70

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True) -> "ClientConfig":
        """Build a config from environment variables.

        Raises MissingSecretError when the secret is not set.
        """
        if dotenv and environ is None:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ if environ is None else environ

        secret = env.get(SECRET_ENV, "").strip()
        if not secret:
            raise MissingSecretError(f"{SECRET_ENV} is not set")

        timeout_raw = env.get("DL_REQUEST_TIMEOUT", "").strip()
        try:
            timeout = float(timeout_raw) if timeout_raw else None
        except ValueError as exc:
            raise ConfigurationError(f"DL_REQUEST_TIMEOUT must be a number, got {timeout_raw!r}") from exc

        return cls(
            secret=secret,
            spec_url=env.get("DL_SPEC_URL", "").strip() or DEFAULT_SPEC_URL,
            request_timeout=timeout,
            user_id=env.get("DL_USER_ID", "").strip() or DEFAULT_USER_ID,
            prompt=env.get("DL_PROMPT") or DEFAULT_PROMPT,
            log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
            log_file=env.get("DL_LOG_FILE", "").strip(),
        )
