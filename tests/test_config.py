from __future__ import annotations

import pytest

from dlclient.config import DEFAULT_SPEC_URL, ClientConfig
from dlclient.errors import ConfigurationError, MissingSecretError


def test_missing_secret() -> None:
    with pytest.raises(MissingSecretError):
        ClientConfig.from_env({})
    with pytest.raises(MissingSecretError):
        ClientConfig.from_env({"DLSecret": "   "})


def test_defaults() -> None:
    config = ClientConfig.from_env({"DLSecret": "s1"})
    assert config.secret == "s1"
    assert config.spec_url == DEFAULT_SPEC_URL
    assert config.user_id == "DirectLineClient"
    assert config.prompt == "Command> "
    assert config.card_width == 70
    assert config.request_timeout is None
    assert config.log_level == "INFO"
    assert config.log_file == ""


def test_overrides() -> None:
    config = ClientConfig.from_env(
        {
            "DLSecret": "s1",
            "DL_SPEC_URL": "http://localhost:3978/swagger.json",
            "DL_USER_ID": "tester",
            "DL_PROMPT": "> ",
            "DL_REQUEST_TIMEOUT": "2.5",
            "LOG_LEVEL": "debug",
            "DL_LOG_FILE": "~/dl.log",
        }
    )
    assert config.spec_url == "http://localhost:3978/swagger.json"
    assert config.user_id == "tester"
    assert config.prompt == "> "
    assert config.request_timeout == 2.5
    assert config.log_level == "DEBUG"
    assert config.log_file == "~/dl.log"


def test_bad_timeout() -> None:
    with pytest.raises(ConfigurationError):
        ClientConfig.from_env({"DLSecret": "s1", "DL_REQUEST_TIMEOUT": "soon"})
