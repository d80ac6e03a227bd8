from __future__ import annotations

from dataclasses import replace

import pytest

from clmm_rebalancer.core.config import ConfigError, get_settings, validate_settings
from clmm_rebalancer.domain.entities.pool import ClmmProtocol
from clmm_rebalancer.domain.services.fraction import Fraction


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("TARGET_POOL", "0xpool")
    monkeypatch.setenv("OPERATOR_ADDRESS", "0xowner")
    monkeypatch.setenv("CLMM_PROTOCOL", "flowx_v3")
    monkeypatch.setenv("SLIPPAGE_TOLERANCE", "0.01")
    monkeypatch.setenv("B_PRICE_PERCENT", "0.1")
    monkeypatch.setenv("T_PRICE_PERCENT", "0.25")
    monkeypatch.setenv("MULTIPLIER", "3")
    monkeypatch.setenv("COMPOUND_REWARDS_SCHEDULE_SECONDS", "3600")
    monkeypatch.setenv("WORKER_ENABLED", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")


def test_settings_parse_environment(configured_env):
    settings = get_settings()

    assert settings.protocol == ClmmProtocol.FLOWX_V3
    assert settings.slippage_tolerance == Fraction(1, 100)
    assert settings.t_price_percent == Fraction(1, 4)
    assert settings.multiplier == 3
    assert settings.compound_rewards_schedule_seconds == 3600.0
    assert settings.worker_enabled is True
    assert settings.log_level == "DEBUG"
    validate_settings(settings)


def test_blank_schedule_disables_compounding(configured_env, monkeypatch):
    monkeypatch.setenv("COMPOUND_REWARDS_SCHEDULE_SECONDS", "")
    assert get_settings().compound_rewards_schedule_seconds is None


def test_unknown_protocol_is_rejected(configured_env, monkeypatch):
    monkeypatch.setenv("CLMM_PROTOCOL", "uniswap")
    with pytest.raises(ConfigError):
        get_settings()


def test_malformed_percent_is_rejected(configured_env, monkeypatch):
    monkeypatch.setenv("SLIPPAGE_TOLERANCE", "half")
    with pytest.raises(ConfigError):
        get_settings()


def test_validation_lists_every_problem(configured_env):
    settings = replace(get_settings(), pool_id="", operator_address="", multiplier=0)

    with pytest.raises(ConfigError) as exc_info:
        validate_settings(settings)

    message = str(exc_info.value)
    assert "TARGET_POOL" in message
    assert "OPERATOR_ADDRESS" in message
    assert "MULTIPLIER" in message


def test_validation_rejects_out_of_bounds_slippage(configured_env):
    settings = replace(get_settings(), slippage_tolerance=Fraction(3, 2))
    with pytest.raises(ConfigError):
        validate_settings(settings)


def test_validation_requires_base_band_below_target_band(configured_env, monkeypatch):
    monkeypatch.setenv("B_PRICE_PERCENT", "0.3")
    monkeypatch.setenv("T_PRICE_PERCENT", "0.2")
    with pytest.raises(ConfigError):
        validate_settings(get_settings())


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("MULTIPLIER", "three"),
        ("SUI_RPC_MAX_RETRIES", "2.5"),
        ("CYCLE_DELAY_SECONDS", "soon"),
        ("COMPOUND_REWARDS_SCHEDULE_SECONDS", "hourly"),
    ],
)
def test_non_numeric_values_raise_config_error(configured_env, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError) as exc_info:
        get_settings()
    assert name in str(exc_info.value)
