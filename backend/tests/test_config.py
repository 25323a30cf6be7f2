import pytest

from ostsee.config import Environment, Settings
from ostsee.exceptions import ConfigurationError


@pytest.mark.parametrize("secret", ["change-me", "kurz"])
def test_production_rejects_weak_session_secret(secret):
    with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
        Settings(environment="production", session_secret=secret)


def test_production_accepts_long_secret():
    settings = Settings(environment="production", session_secret="x" * 40)
    assert settings.environment is Environment.PRODUCTION


def test_development_keeps_default_secret():
    assert Settings(environment="development", session_secret="change-me").session_secret == "change-me"
