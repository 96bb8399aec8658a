"""Tests for environment-driven constants."""

import importlib
import logging

import retoken.constants as constants


def _reload():
    return importlib.reload(constants)


def test_defaults(monkeypatch):
    for name in (
        "RETOKEN_EXPIRATION_LEEWAY_SECONDS",
        "RETOKEN_RETRY_DELAYS_MS",
        "RETOKEN_SKIP_ON_CLIENT_ERROR",
    ):
        monkeypatch.delenv(name, raising=False)
    mod = _reload()
    assert mod.RETOKEN_EXPIRATION_LEEWAY_SECONDS == 60
    assert mod.RETOKEN_RETRY_DELAYS_MS == (3000, 6000, 12000)
    assert mod.RETOKEN_SKIP_ON_CLIENT_ERROR is True
    assert mod.RETRY_STATUSES == frozenset({401})
    assert mod.REFRESH_FAILURE_STATUSES == frozenset({401, 403})


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("RETOKEN_EXPIRATION_LEEWAY_SECONDS", "15")
    monkeypatch.setenv("RETOKEN_RETRY_DELAYS_MS", "100, 200")
    monkeypatch.setenv("RETOKEN_SKIP_ON_CLIENT_ERROR", "false")
    try:
        mod = _reload()
        assert mod.RETOKEN_EXPIRATION_LEEWAY_SECONDS == 15
        assert mod.RETOKEN_RETRY_DELAYS_MS == (100, 200)
        assert mod.RETOKEN_SKIP_ON_CLIENT_ERROR is False
    finally:
        monkeypatch.undo()
        _reload()


def test_invalid_env_falls_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("RETOKEN_EXPIRATION_LEEWAY_SECONDS", "soon")
    monkeypatch.setenv("RETOKEN_RETRY_DELAYS_MS", "1,x")
    try:
        with caplog.at_level(logging.WARNING):
            mod = _reload()
        assert mod.RETOKEN_EXPIRATION_LEEWAY_SECONDS == 60
        assert mod.RETOKEN_RETRY_DELAYS_MS == (3000, 6000, 12000)
        assert "RETOKEN_EXPIRATION_LEEWAY_SECONDS" in caplog.text
    finally:
        monkeypatch.undo()
        _reload()
