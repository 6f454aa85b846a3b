"""Unit tests for application startup."""

import pytest

from recaptcha_validator.core.errors import ConfigurationError
from recaptcha_validator.main import create_app, lifespan, run


@pytest.fixture
def uvicorn_calls(monkeypatch) -> list[dict]:
    calls: list[dict] = []

    def _fake_run(app, **kwargs):
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr("uvicorn.run", _fake_run)
    return calls


def test_run_exits_non_zero_without_secret(settings_env, uvicorn_calls):
    settings_env(RECAPTCHA_SECRET_KEY=None)

    with pytest.raises(SystemExit) as exc_info:
        run()

    assert exc_info.value.code == 1
    assert uvicorn_calls == []


def test_run_exits_non_zero_with_blank_secret(settings_env, uvicorn_calls):
    settings_env(RECAPTCHA_SECRET_KEY="   ")

    with pytest.raises(SystemExit) as exc_info:
        run()

    assert exc_info.value.code == 1
    assert uvicorn_calls == []


def test_run_starts_uvicorn_on_configured_port(settings_env, uvicorn_calls):
    settings_env(SERVER_PORT=None, PORT="8081")

    run()

    assert len(uvicorn_calls) == 1
    call = uvicorn_calls[0]
    assert call["app"] == "recaptcha_validator.main:create_app"
    assert call["factory"] is True
    assert call["port"] == 8081
    assert call["reload"] is False


def test_run_defaults_to_port_1323(settings_env, uvicorn_calls):
    settings_env(SERVER_PORT=None, PORT=None)

    run()

    assert uvicorn_calls[0]["port"] == 1323


@pytest.mark.asyncio
async def test_lifespan_refuses_to_start_without_secret(settings_env):
    settings_env(RECAPTCHA_SECRET_KEY=None)
    app = create_app()

    with pytest.raises(ConfigurationError):
        async with lifespan(app):
            pass


@pytest.mark.asyncio
async def test_lifespan_creates_and_closes_client():
    app = create_app()

    async with lifespan(app):
        client = app.state.recaptcha_client
        assert client is not None
        await client._get_client()

    assert client._client is None
