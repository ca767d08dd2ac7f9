from __future__ import annotations

import os
from pathlib import Path

import pytest

from pianopay.orders import ApiConfig, PaymentMethod
from pianopay.session import SessionPolicy


def test_api_config_is_fluent_and_immutable() -> None:
    base = ApiConfig()
    custom = base.with_base_url("https://shop.example/api/").with_timeout(seconds=3)

    assert base.base_url == "http://localhost:5000/api"
    assert custom.timeout == 3
    assert custom.url("/orders/7/status") == "https://shop.example/api/orders/7/status"


def test_api_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PIANOPAY_API_URL", "https://api.example/api")
    monkeypatch.setenv("PIANOPAY_API_TIMEOUT", "2.5")

    config = ApiConfig.from_env(dotenv_path="/nonexistent/.env")

    assert config.base_url == "https://api.example/api"
    assert config.timeout == 2.5


def test_api_config_from_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("PIANOPAY_API_URL", raising=False)
    monkeypatch.delenv("PIANOPAY_API_TIMEOUT", raising=False)
    env = tmp_path / ".env"
    env.write_text("PIANOPAY_API_URL=https://dotenv.example/api\n")

    try:
        config = ApiConfig.from_env(dotenv_path=str(env))
    finally:
        os.environ.pop("PIANOPAY_API_URL", None)

    assert config.base_url == "https://dotenv.example/api"
    assert config.timeout == 10.0


def test_session_policy() -> None:
    policy = SessionPolicy().with_intervals(poll=2).with_failure_threshold(5)

    assert policy.countdown_interval == 1.0
    assert policy.poll_interval == 2
    assert policy.poll_failure_threshold == 5
    assert SessionPolicy().poll_interval == 5.0


def test_session_policy_methods() -> None:
    qr_only = SessionPolicy().with_methods(PaymentMethod.QR)

    assert qr_only.allowed_methods == (PaymentMethod.QR,)
    assert qr_only.default_method is PaymentMethod.QR
    with pytest.raises(ValueError):
        SessionPolicy().with_methods()
