from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import os

from dotenv import load_dotenv

from clmm_rebalancer.domain.entities.pool import ClmmProtocol
from clmm_rebalancer.domain.services.fraction import Percent


load_dotenv()


class ConfigError(ValueError):
    pass


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _int(name: str, default: str) -> int:
    raw = _env(name, default) or default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc


def _float(name: str, default: str) -> float:
    raw = _env(name, default) or default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}.") from exc


def _optional_float(name: str) -> float | None:
    value = _env(name)
    if value is None or not value.strip():
        return None
    return _float(name, value)


def _percent(name: str, default: str) -> Percent:
    raw = _env(name, default) or default
    try:
        return Percent.from_decimal(Decimal(raw.strip()))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigError(f"{name} must be a decimal fraction, got {raw!r}.") from exc


def _protocol(name: str, default: str) -> ClmmProtocol:
    raw = (_env(name, default) or default).strip().upper()
    try:
        return ClmmProtocol(raw)
    except ValueError as exc:
        supported = ", ".join(item.value for item in ClmmProtocol)
        raise ConfigError(f"{name} must be one of {supported}, got {raw!r}.") from exc


@dataclass(frozen=True)
class Settings:
    sui_rpc_url: str
    sui_rpc_timeout_seconds: float
    sui_rpc_max_retries: int
    signer_sidecar_url: str
    signer_timeout_seconds: float
    protocol: ClmmProtocol
    pool_id: str
    operator_address: str
    slippage_tolerance: Percent
    multiplier: int
    b_price_percent: Percent
    t_price_percent: Percent
    compound_rewards_schedule_seconds: float | None
    cycle_delay_seconds: float
    cycle_timeout_seconds: float
    settle_delay_seconds: float
    range_widening_spacings: int
    state_dsn: str
    worker_enabled: bool
    log_level: str


def get_settings() -> Settings:
    return Settings(
        sui_rpc_url=_env("SUI_RPC_URL", "https://fullnode.mainnet.sui.io:443"),
        sui_rpc_timeout_seconds=_float("SUI_RPC_TIMEOUT_SECONDS", "10"),
        sui_rpc_max_retries=_int("SUI_RPC_MAX_RETRIES", "3"),
        signer_sidecar_url=_env("SIGNER_SIDECAR_URL", "http://127.0.0.1:8787"),
        signer_timeout_seconds=_float("SIGNER_TIMEOUT_SECONDS", "60"),
        protocol=_protocol("CLMM_PROTOCOL", "CETUS"),
        pool_id=_env("TARGET_POOL", ""),
        operator_address=_env("OPERATOR_ADDRESS", ""),
        slippage_tolerance=_percent("SLIPPAGE_TOLERANCE", "0.005"),
        multiplier=_int("MULTIPLIER", "1"),
        b_price_percent=_percent("B_PRICE_PERCENT", "0.1"),
        t_price_percent=_percent("T_PRICE_PERCENT", "0.2"),
        compound_rewards_schedule_seconds=_optional_float("COMPOUND_REWARDS_SCHEDULE_SECONDS"),
        cycle_delay_seconds=_float("CYCLE_DELAY_SECONDS", "5"),
        cycle_timeout_seconds=_float("CYCLE_TIMEOUT_SECONDS", "300"),
        settle_delay_seconds=_float("SETTLE_DELAY_SECONDS", "5"),
        range_widening_spacings=_int("RANGE_WIDENING_SPACINGS", "1"),
        state_dsn=_env("STATE_DSN", "sqlite:///clmm_rebalancer_state.db"),
        worker_enabled=_bool("WORKER_ENABLED"),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def validate_settings(settings: Settings) -> None:
    problems: list[str] = []
    if not settings.pool_id:
        problems.append("TARGET_POOL is required.")
    if not settings.operator_address:
        problems.append("OPERATOR_ADDRESS is required.")
    if not settings.sui_rpc_url:
        problems.append("SUI_RPC_URL is required.")
    if not settings.signer_sidecar_url:
        problems.append("SIGNER_SIDECAR_URL is required.")
    if settings.slippage_tolerance.lt(0) or settings.slippage_tolerance.gt(1):
        problems.append("SLIPPAGE_TOLERANCE must be between 0 and 1.")
    if settings.multiplier < 1:
        problems.append("MULTIPLIER must be at least 1.")
    if not settings.b_price_percent.gt(0) or not settings.b_price_percent.lt(1):
        problems.append("B_PRICE_PERCENT must be strictly between 0 and 1.")
    if not settings.t_price_percent.gt(0) or not settings.t_price_percent.lt(1):
        problems.append("T_PRICE_PERCENT must be strictly between 0 and 1.")
    if not settings.b_price_percent.lt(settings.t_price_percent):
        problems.append("B_PRICE_PERCENT must be below T_PRICE_PERCENT.")
    if settings.compound_rewards_schedule_seconds is not None and settings.compound_rewards_schedule_seconds <= 0:
        problems.append("COMPOUND_REWARDS_SCHEDULE_SECONDS must be positive when set.")
    if settings.cycle_timeout_seconds <= 0:
        problems.append("CYCLE_TIMEOUT_SECONDS must be positive.")
    if settings.cycle_delay_seconds < 0 or settings.settle_delay_seconds < 0:
        problems.append("CYCLE_DELAY_SECONDS and SETTLE_DELAY_SECONDS must be non-negative.")
    if settings.range_widening_spacings < 0:
        problems.append("RANGE_WIDENING_SPACINGS must be non-negative.")
    if settings.sui_rpc_max_retries < 1:
        problems.append("SUI_RPC_MAX_RETRIES must be at least 1.")
    if problems:
        raise ConfigError(" ".join(problems))
