from __future__ import annotations

import json
import logging
import sys

import pytest

from svc_content.app.core import env as env_mod
from svc_content.app.core.env import Env, get_env, get_env_flags, pick
from svc_content.app.core.logging import JsonFormatter, _read_format, _read_level
from svc_content.app.settings import AppSettings


@pytest.fixture
def fresh_env():
    get_env.cache_clear()
    yield
    get_env.cache_clear()


class TestEnv:
    @pytest.mark.parametrize(
        "raw,expected",
        [("production", Env.PROD), ("dev", Env.DEV), ("testing", Env.TEST), ("ci", Env.TEST), (" LOCAL ", Env.LOCAL)],
    )
    def test_aliases(self, monkeypatch, fresh_env, raw, expected):
        monkeypatch.setenv("APP_ENV", raw)
        assert get_env() is expected

    def test_environment_fallback(self, monkeypatch, fresh_env):
        monkeypatch.delenv("APP_ENV", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "prod")
        assert get_env() is Env.PROD

    def test_unknown_value_warns(self, monkeypatch, fresh_env):
        monkeypatch.setenv("APP_ENV", "staging-ish")
        with pytest.warns(RuntimeWarning):
            assert get_env() is Env.LOCAL

    def test_flags(self):
        flags = get_env_flags(Env.TEST)
        assert flags.is_test and not flags.is_prod

    def test_pick(self, monkeypatch, fresh_env):
        monkeypatch.setenv("APP_ENV", "prod")
        assert pick(prod="json", nonprod="plain") == "json"
        get_env.cache_clear()
        monkeypatch.setenv("APP_ENV", "dev")
        assert pick(prod="json", nonprod="plain", dev="dev") == "dev"


class TestAppSettings:
    def test_defaults(self, monkeypatch):
        for var in ("APP_DEMO", "APP_RESEND_KEY", "APP_BIGCOMMERCE_CLIENT_ID"):
            monkeypatch.delenv(var, raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.demo is False
        assert settings.session_lifetime_seconds == 259_200
        assert settings.verification_lifetime_seconds == 300
        assert settings.bigcommerce_enabled is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_DEMO", "true")
        monkeypatch.setenv("APP_RESEND_KEY", "re_123")
        settings = AppSettings(_env_file=None)
        assert settings.demo is True
        assert settings.resend_key.get_secret_value() == "re_123"
        assert "re_123" not in repr(settings)

    def test_bigcommerce_needs_id_and_secret(self):
        assert AppSettings(_env_file=None, bigcommerce_client_id="id").bigcommerce_enabled is False
        assert AppSettings(
            _env_file=None, bigcommerce_client_id="id", bigcommerce_client_secret="s"
        ).bigcommerce_enabled is True


class TestLogging:
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord("svc_content.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_json_formatter_basic_fields(self):
        payload = json.loads(JsonFormatter().format(self._record()))
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "svc_content.test"
        assert "http" not in payload

    def test_json_formatter_request_context(self):
        record = self._record(http_method="PUT", path="/api/pages/home", user="a@example.com")
        payload = json.loads(JsonFormatter().format(record))
        assert payload["http"] == {"method": "PUT", "path": "/api/pages/home"}
        assert payload["user"] == "a@example.com"

    def test_json_formatter_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()
        payload = json.loads(JsonFormatter().format(record))
        assert payload["error"]["type"] == "ValueError"
        assert payload["error"]["message"] == "bad value"
        assert "Traceback" in payload["error"]["stack"]

    def test_level_and_format_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        assert _read_level() == "WARNING"
        assert _read_format() == "json"

    def test_prod_defaults(self, monkeypatch, fresh_env):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.setenv("APP_ENV", "production")
        assert _read_level() == "INFO"
        assert _read_format() == "json"


def test_module_flags_are_consistent():
    assert sum([env_mod.IS_LOCAL, env_mod.IS_DEV, env_mod.IS_TEST, env_mod.IS_PROD]) == 1
