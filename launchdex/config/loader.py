"""
Launchdex TOML Configuration Loader

Loads every section of launchdex.toml with environment variable overrides,
then freezes the result into the immutable snapshots the engine is called
with. Pricing code never reads configuration itself; hosts pass an
AMMConfig / OracleConfig / LaunchpadConfig into every call.

Environment variable mapping:
    [amm] fee_bps                   → LAUNCHDEX_FEE_BPS
    [amm] max_price_impact_bps      → LAUNCHDEX_MAX_PRICE_IMPACT_BPS
    [launchpad] trading_fee_bps     → LAUNCHDEX_TRADING_FEE_BPS
    [launchpad] curve_shape         → LAUNCHDEX_CURVE_SHAPE
    [logging] level                 → LAUNCHDEX_LOG_LEVEL
    ...
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    BONDING_CURVE_SUPPLY,
    CREATION_FEE,
    DEFAULT_FEE_BPS,
    FEE_DENOMINATOR,
    GRADUATION_THRESHOLD,
    MAX_PRICE_IMPACT_BPS,
    MIN_LIQUIDITY_AMOUNT,
    MIN_SWAP_AMOUNT,
    MINIMUM_LIQUIDITY,
    ORACLE_CAPACITY,
    ORACLE_PRECISION,
    TRADING_FEE_BPS,
    VIRTUAL_BASE_RESERVE,
)
from ..exceptions import ConfigurationError
from ..exchange.bonding_curve import CurveShape
from ..exchange.fees import FeeConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Engine snapshots: immutable, passed explicitly into every engine call
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AMMConfig:
    fee_bps: int = DEFAULT_FEE_BPS
    max_price_impact_bps: int = MAX_PRICE_IMPACT_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    min_swap_amount: int = MIN_SWAP_AMOUNT
    min_liquidity_amount: int = MIN_LIQUIDITY_AMOUNT


@dataclass(frozen=True)
class OracleConfig:
    capacity: int = ORACLE_CAPACITY
    precision: int = ORACLE_PRECISION


@dataclass(frozen=True)
class LaunchpadConfig:
    fees: FeeConfig = field(default_factory=FeeConfig)
    virtual_base_reserve: int = VIRTUAL_BASE_RESERVE
    bonding_curve_supply: int = BONDING_CURVE_SUPPLY
    graduation_threshold: int = GRADUATION_THRESHOLD
    curve_shape: CurveShape = CurveShape.CONSTANT_PRODUCT
    max_price_change_bps: Optional[int] = None
    amm: AMMConfig = field(default_factory=AMMConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)


# ---------------------------------------------------------------------------
# Subsection dataclasses: one per [section] of launchdex.toml
# ---------------------------------------------------------------------------


def _env_int(name: str) -> Optional[int]:
    if v := os.environ.get(name):
        try:
            return int(v)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {v!r}")
    return None


@dataclass
class AMMSectionConfig:
    """[amm] section."""
    fee_bps: int = DEFAULT_FEE_BPS
    max_price_impact_bps: int = MAX_PRICE_IMPACT_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    min_swap_amount: int = MIN_SWAP_AMOUNT
    min_liquidity_amount: int = MIN_LIQUIDITY_AMOUNT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AMMSectionConfig":
        return cls(
            fee_bps=data.get("fee_bps", DEFAULT_FEE_BPS),
            max_price_impact_bps=data.get("max_price_impact_bps", MAX_PRICE_IMPACT_BPS),
            minimum_liquidity=data.get("minimum_liquidity", MINIMUM_LIQUIDITY),
            min_swap_amount=data.get("min_swap_amount", MIN_SWAP_AMOUNT),
            min_liquidity_amount=data.get("min_liquidity_amount", MIN_LIQUIDITY_AMOUNT),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if (v := _env_int("LAUNCHDEX_FEE_BPS")) is not None:
            self.fee_bps = v
        if (v := _env_int("LAUNCHDEX_MAX_PRICE_IMPACT_BPS")) is not None:
            self.max_price_impact_bps = v
        if (v := _env_int("LAUNCHDEX_MINIMUM_LIQUIDITY")) is not None:
            self.minimum_liquidity = v

    def validate(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ConfigurationError(f"amm.fee_bps must be in [0, {FEE_DENOMINATOR}), got {self.fee_bps}")
        if not 0 <= self.max_price_impact_bps <= FEE_DENOMINATOR:
            raise ConfigurationError(f"Invalid amm.max_price_impact_bps: {self.max_price_impact_bps}")
        if self.minimum_liquidity < 0:
            raise ConfigurationError("amm.minimum_liquidity must be >= 0")
        if self.min_swap_amount < 0 or self.min_liquidity_amount < 0:
            raise ConfigurationError("amm dust thresholds must be >= 0")

    def snapshot(self) -> AMMConfig:
        return AMMConfig(
            fee_bps=self.fee_bps,
            max_price_impact_bps=self.max_price_impact_bps,
            minimum_liquidity=self.minimum_liquidity,
            min_swap_amount=self.min_swap_amount,
            min_liquidity_amount=self.min_liquidity_amount,
        )


@dataclass
class OracleSectionConfig:
    """[oracle] section."""
    capacity: int = ORACLE_CAPACITY
    precision: int = ORACLE_PRECISION

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OracleSectionConfig":
        return cls(
            capacity=data.get("capacity", ORACLE_CAPACITY),
            precision=data.get("precision", ORACLE_PRECISION),
        )

    def apply_env(self) -> None:
        if (v := _env_int("LAUNCHDEX_ORACLE_CAPACITY")) is not None:
            self.capacity = v

    def validate(self) -> None:
        if self.capacity < 1:
            raise ConfigurationError("oracle.capacity must be >= 1")
        if self.precision < 1:
            raise ConfigurationError("oracle.precision must be >= 1")

    def snapshot(self) -> OracleConfig:
        return OracleConfig(capacity=self.capacity, precision=self.precision)


@dataclass
class LaunchpadSectionConfig:
    """[launchpad] section."""
    creation_fee: int = CREATION_FEE
    trading_fee_bps: int = TRADING_FEE_BPS
    treasury: str = "treasury"
    virtual_base_reserve: int = VIRTUAL_BASE_RESERVE
    bonding_curve_supply: int = BONDING_CURVE_SUPPLY
    graduation_threshold: int = GRADUATION_THRESHOLD
    curve_shape: str = CurveShape.CONSTANT_PRODUCT.value
    max_price_change_bps: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LaunchpadSectionConfig":
        return cls(
            creation_fee=data.get("creation_fee", CREATION_FEE),
            trading_fee_bps=data.get("trading_fee_bps", TRADING_FEE_BPS),
            treasury=data.get("treasury", "treasury"),
            virtual_base_reserve=data.get("virtual_base_reserve", VIRTUAL_BASE_RESERVE),
            bonding_curve_supply=data.get("bonding_curve_supply", BONDING_CURVE_SUPPLY),
            graduation_threshold=data.get("graduation_threshold", GRADUATION_THRESHOLD),
            curve_shape=data.get("curve_shape", CurveShape.CONSTANT_PRODUCT.value),
            max_price_change_bps=data.get("max_price_change_bps"),
        )

    def apply_env(self) -> None:
        if (v := _env_int("LAUNCHDEX_CREATION_FEE")) is not None:
            self.creation_fee = v
        if (v := _env_int("LAUNCHDEX_TRADING_FEE_BPS")) is not None:
            self.trading_fee_bps = v
        if v := os.environ.get("LAUNCHDEX_TREASURY"):
            self.treasury = v
        if (v := _env_int("LAUNCHDEX_GRADUATION_THRESHOLD")) is not None:
            self.graduation_threshold = v
        if v := os.environ.get("LAUNCHDEX_CURVE_SHAPE"):
            self.curve_shape = v.lower()
        if (v := _env_int("LAUNCHDEX_MAX_PRICE_CHANGE_BPS")) is not None:
            self.max_price_change_bps = v

    def validate(self) -> None:
        if self.creation_fee < 0:
            raise ConfigurationError("launchpad.creation_fee must be >= 0")
        if not 0 <= self.trading_fee_bps <= FEE_DENOMINATOR:
            raise ConfigurationError(f"Invalid launchpad.trading_fee_bps: {self.trading_fee_bps}")
        if not self.treasury:
            raise ConfigurationError("launchpad.treasury must not be empty")
        if self.virtual_base_reserve < 1:
            raise ConfigurationError("launchpad.virtual_base_reserve must be >= 1")
        if self.bonding_curve_supply < 1:
            raise ConfigurationError("launchpad.bonding_curve_supply must be >= 1")
        if self.graduation_threshold < 1:
            raise ConfigurationError("launchpad.graduation_threshold must be >= 1")
        if self.curve_shape not in {shape.value for shape in CurveShape}:
            raise ConfigurationError(f"Invalid launchpad.curve_shape: {self.curve_shape}")
        if self.max_price_change_bps is not None and self.max_price_change_bps < 0:
            raise ConfigurationError("launchpad.max_price_change_bps must be >= 0")


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(level=str(data.get("level", "INFO")).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("LAUNCHDEX_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid logging.level: {self.level}")


# -----------------------------------------------------------------------
# Top-level unified config
# -----------------------------------------------------------------------

@dataclass
class LaunchdexConfig:
    """
    Unified launchdex configuration.

    Loads every section of launchdex.toml and applies environment variable
    overrides. Hosts call the ``*_config()`` accessors to get the frozen
    snapshots the engine consumes.
    """
    amm: AMMSectionConfig = field(default_factory=AMMSectionConfig)
    oracle: OracleSectionConfig = field(default_factory=OracleSectionConfig)
    launchpad: LaunchpadSectionConfig = field(default_factory=LaunchpadSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LaunchdexConfig":
        """Create LaunchdexConfig from a parsed TOML dict."""
        return cls(
            amm=AMMSectionConfig.from_dict(data.get("amm", {})),
            oracle=OracleSectionConfig.from_dict(data.get("oracle", {})),
            launchpad=LaunchpadSectionConfig.from_dict(data.get("launchpad", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "LaunchdexConfig":
        """
        Load configuration from a TOML file.

        A missing file is not an error: defaults are used, with env overrides.

        Raises:
            ConfigurationError: on unreadable TOML or invalid values
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            cfg.validate()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        cfg.validate()
        logger.debug("Loaded configuration from %s", config_path)
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.amm.apply_env()
        self.oracle.apply_env()
        self.launchpad.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.amm.validate()
        self.oracle.validate()
        self.launchpad.validate()
        self.logging.validate()
        return True

    # --- engine snapshots -------------------------------------------------

    def amm_config(self) -> AMMConfig:
        return self.amm.snapshot()

    def oracle_config(self) -> OracleConfig:
        return self.oracle.snapshot()

    def launchpad_config(self) -> LaunchpadConfig:
        lp = self.launchpad
        return LaunchpadConfig(
            fees=FeeConfig(
                trading_fee_bps=lp.trading_fee_bps,
                creation_fee=lp.creation_fee,
                treasury=lp.treasury,
            ),
            virtual_base_reserve=lp.virtual_base_reserve,
            bonding_curve_supply=lp.bonding_curve_supply,
            graduation_threshold=lp.graduation_threshold,
            curve_shape=CurveShape(lp.curve_shape),
            max_price_change_bps=lp.max_price_change_bps,
            amm=self.amm_config(),
            oracle=self.oracle_config(),
        )

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "amm": {
                "fee_bps": self.amm.fee_bps,
                "max_price_impact_bps": self.amm.max_price_impact_bps,
                "minimum_liquidity": self.amm.minimum_liquidity,
                "min_swap_amount": self.amm.min_swap_amount,
                "min_liquidity_amount": self.amm.min_liquidity_amount,
            },
            "oracle": {
                "capacity": self.oracle.capacity,
                "precision": self.oracle.precision,
            },
            "launchpad": {
                "creation_fee": self.launchpad.creation_fee,
                "trading_fee_bps": self.launchpad.trading_fee_bps,
                "treasury": self.launchpad.treasury,
                "virtual_base_reserve": self.launchpad.virtual_base_reserve,
                "bonding_curve_supply": self.launchpad.bonding_curve_supply,
                "graduation_threshold": self.launchpad.graduation_threshold,
                "curve_shape": self.launchpad.curve_shape,
                "max_price_change_bps": self.launchpad.max_price_change_bps,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> LaunchdexConfig:
    """
    Load launchdex configuration.

    Resolution order:
        1. Explicit *path* argument
        2. LAUNCHDEX_CONFIG env var
        3. ./launchdex.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("LAUNCHDEX_CONFIG", "launchdex.toml")

    return LaunchdexConfig.from_file(path)
