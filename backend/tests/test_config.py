from __future__ import annotations

import pytest

from monthsheet.__main__ import serve
from monthsheet.config import Settings
from monthsheet.times import Time


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TS_CONTRACTUAL_WORKING_TIME", "40:00")
    monkeypatch.setenv("TS_WARN_ON_HOURS_MISMATCH", "false")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    config = Settings(_env_file=None)

    assert config.log_level == "DEBUG"
    limits = config.limits()
    assert limits.contractual_working_time == Time(40, 0)
    assert limits.warn_on_hours_mismatch is False


def test_cors_origins_are_opt_in() -> None:
    assert Settings(_env_file=None).allowed_origins() == []
    config = Settings(_env_file=None, cors_origins="http://localhost:3000, https://sheet.example.org,")
    assert config.allowed_origins() == ["http://localhost:3000", "https://sheet.example.org"]


def test_settings_reject_negative_contractual_time() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, contractual_working_time="-01:00")


def test_serve_passes_configuration_to_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(app: str, **kwargs) -> None:
        calls.append((app, kwargs))

    monkeypatch.setattr("monthsheet.__main__.uvicorn.run", fake_run)
    serve(Settings(_env_file=None, host="0.0.0.0", port=9001, log_level="warning"))

    assert calls == [
        ("monthsheet.main:app", {"host": "0.0.0.0", "port": 9001, "log_level": "warning", "reload": False})
    ]
