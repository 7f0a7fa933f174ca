"""Settings and policy configuration."""

import pytest
from pydantic import ValidationError

from app.alerts import AlertPolicy
from app.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("LOW_STOCK_THRESHOLDS", raising=False)
    settings = Settings(_env_file=None)
    policy = AlertPolicy.from_settings(settings)
    assert policy.thresholds == {"simple": 20, "bundle": 10}
    assert policy.default_threshold == 15
    assert policy.window_days == 30


def test_thresholds_from_environment(monkeypatch):
    monkeypatch.setenv("LOW_STOCK_THRESHOLDS", '{"simple": 50, "bundle": 5, "kit": 8}')
    monkeypatch.setenv("DEFAULT_LOW_STOCK_THRESHOLD", "3")
    policy = AlertPolicy.from_settings(Settings(_env_file=None))
    assert policy.threshold_for("simple") == 50
    assert policy.threshold_for("kit") == 8
    assert policy.threshold_for("other") == 3


def test_negative_threshold_rejected(monkeypatch):
    monkeypatch.setenv("LOW_STOCK_THRESHOLDS", '{"simple": -1}')
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_concurrency_must_be_positive(monkeypatch):
    monkeypatch.setenv("ALERTS_MAX_CONCURRENCY", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "info")
    assert Settings(_env_file=None).LOG_LEVEL == "INFO"


def test_unknown_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
