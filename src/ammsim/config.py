"""Configuration system using pydantic-settings with environment variable loading."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoolSettings(BaseSettings):
    """Pool construction parameters, handed to the configured pool factory.

    Defaults mirror the WBTC/USDT pool the demo is calibrated on
    (4 Dec 2025: 93323 USDT per BTC).
    """

    model_config = SettingsConfigDict(env_prefix="POOL_")

    factory: str = ""  # "package.module:callable" returning a Pool
    initial_tick: int = 114445
    init_ticks: int = 1000  # +-10% around the initial price
    base_qty: Decimal = Decimal("100")
    quote_qty: Decimal = Decimal("9000000")


class TradeGenSettings(BaseSettings):
    """Size-search bounds for synthetic trades, per input asset."""

    model_config = SettingsConfigDict(env_prefix="TRADEGEN_")

    base_default_qty: Decimal = Decimal("0.1")
    base_min_qty: Decimal = Decimal("0.001")
    quote_default_qty: Decimal = Decimal("10000")
    quote_min_qty: Decimal = Decimal("100")


class DayCycleSettings(BaseSettings):
    """Day rollover, corridor and pivot random-walk parameters.

    The probabilities and the target multiplier are tunable constants,
    not derived from any market model.
    """

    model_config = SettingsConfigDict(env_prefix="DAYCYCLE_")

    avg_daily_volume: Decimal = Decimal("24300000")  # quote units, seeds day 1 only
    volatility: Decimal = Decimal("0.05")  # fractional daily volatility
    target_multiplier: Decimal = Decimal("2.5")  # next target = depth * multiplier
    escape_probability: Decimal = Decimal("0.5")  # reference inside corridor
    pull_probability: Decimal = Decimal("0.99")  # reference outside corridor
    reference_tick: int = 1  # tick whose price anchors the volatility-to-width conversion
    # Completed days kept; with today this makes the 30-day window
    trailing_depth: int = Field(default=29, ge=1, le=29)


class SimulationSettings(BaseSettings):
    """Pacing and sampling loop parameters."""

    model_config = SettingsConfigDict(env_prefix="SIM_")

    speed: int = 50  # 1..100, interval = (101 - speed) / 100 seconds
    sample_interval: float = 0.1  # seconds between metrics snapshots
    start_paused: bool = False
    seed: int | None = None


class DashboardSettings(BaseSettings):
    """Metrics feed server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


@dataclass
class RuntimeConfig:
    """Mutable runtime overlay. Non-None fields override the settings values.

    Used by the metrics feed to change speed and volatility without
    restarting. Changes apply before the next scheduled trade.
    """

    speed: int | None = None
    volatility: Decimal | None = None


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    pool: PoolSettings = PoolSettings()
    tradegen: TradeGenSettings = TradeGenSettings()
    day_cycle: DayCycleSettings = DayCycleSettings()
    simulation: SimulationSettings = SimulationSettings()
    dashboard: DashboardSettings = DashboardSettings()
