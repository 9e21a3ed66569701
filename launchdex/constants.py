"""
Launchdex Constants

This module consolidates the protocol constants and the environment-driven
logging settings used throughout the codebase. Constants are organized by
category for easy reference and maintenance.

Protocol constants are defaults only: the engine never reads them from inside
a pricing function. Every call receives an explicit config snapshot (see
launchdex.config) that is built from these values.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW DEFINE THE PRICING RULES. CHANGING THEM CHANGES EVERY QUOTE THE ENGINE
# PRODUCES, AND TWO HOSTS WITH DIFFERENT VALUES WILL DISAGREE ON SETTLEMENT AMOUNTS FOR THE SAME TRADE.

# ==================================================================================
# INTEGER WIDTH
# ==================================================================================
I128_MAX = 2**127 - 1
I128_MIN = -(2**127)


# ==================================================================================
# AMM PARAMETERS
# ==================================================================================
FEE_DENOMINATOR = 10_000           # basis points in 100%
DEFAULT_FEE_BPS = 30               # 0.3%, Uniswap V2 equivalent
MAX_PRICE_IMPACT_BPS = 500         # 5%
MINIMUM_LIQUIDITY = 1_000          # LP units burned on first deposit
MIN_SWAP_AMOUNT = 100
MIN_LIQUIDITY_AMOUNT = 1_000


# ==================================================================================
# ORACLE PARAMETERS
# ==================================================================================
ORACLE_PRECISION = 1_000_000_000   # cumulative prices are scaled by 1e9
ORACLE_CAPACITY = 8                # ring buffer slots


# ==================================================================================
# BONDING CURVE PARAMETERS
# ==================================================================================
TOKEN_DECIMALS = 7
PRICE_PRECISION = 10**TOKEN_DECIMALS          # base units per whole token
SHAPE_PRECISION = 1_000_000                   # fixed-point scale of shaped curves
VIRTUAL_BASE_RESERVE = 1_000 * PRICE_PRECISION
INITIAL_SUPPLY = 1_000_000_000 * PRICE_PRECISION
BONDING_CURVE_SUPPLY = INITIAL_SUPPLY * 8 // 10        # 80% of supply sold on the curve
GRADUATION_THRESHOLD = 100_000_000_000        # 10,000 whole base units raised


# ==================================================================================
# LAUNCHPAD FEES
# ==================================================================================
CREATION_FEE = 100_000
TRADING_FEE_BPS = 100              # 1%
MAX_ADMIN_TRADING_FEE_BPS = 1_000  # 10% ceiling for fee updates
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 12


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    def __hash__(self):
        return hash(bool(self))


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
