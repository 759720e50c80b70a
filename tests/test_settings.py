from __future__ import annotations

import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env,expected",
    [
        ("production", "config.production"),
        ("prod", "config.production"),
        ("testing", "config.testing"),
        ("anything", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == expected


def test_testing_settings_use_memory_store(monkeypatch):
    monkeypatch.delenv("STORE", raising=False)
    settings = importlib.reload(importlib.import_module("config.testing"))

    assert settings.STORE == "memory"
    assert settings.LEAVE_RETRY_ATTEMPTS == 0
