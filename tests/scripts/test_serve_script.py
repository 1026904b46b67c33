"""Tests for the serve script — uvicorn wiring."""

import pytest

from natega.config.settings import get_settings
from scripts import serve


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = []

    def _run(app, **kwargs):
        calls.append((app, kwargs))

    monkeypatch.setattr(serve.uvicorn, "run", _run)
    return calls


class TestServe:

    def test_defaults_from_settings(self, uvicorn_calls) -> None:
        settings = get_settings()
        assert serve.main([]) == 0
        assert uvicorn_calls == [(
            "natega.api.main:app",
            {
                "host": settings.API_HOST,
                "port": settings.API_PORT,
                "log_level": settings.LOG_LEVEL.lower(),
            },
        )]

    def test_host_and_port_override(self, uvicorn_calls) -> None:
        serve.main(["--host", "0.0.0.0", "--port", "9001"])
        (_, kwargs), = uvicorn_calls
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9001
