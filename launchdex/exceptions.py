"""
Launchdex Exceptions

Custom exception classes for the launchdex pricing engine.

Every engine failure is an EngineError tagged with a single ErrorKind, so
callers can branch on ``err.kind`` without knowing which component raised it.
"""

from enum import IntEnum


class ErrorKind(IntEnum):
    """Failure kinds shared by every engine component."""

    # Math (1-9)
    OVERFLOW = 1
    UNDERFLOW = 2
    DIVISION_BY_ZERO = 3

    # Input validation (10-19)
    INVALID_AMOUNT = 10
    INVALID_TOKEN_PAIR = 11
    INVALID_NAME = 12
    INVALID_SYMBOL = 13

    # Liquidity (20-39)
    INSUFFICIENT_LIQUIDITY = 20
    INSUFFICIENT_INPUT_AMOUNT = 21
    INSUFFICIENT_OUTPUT_AMOUNT = 22
    INSUFFICIENT_RESERVE = 23
    INSUFFICIENT_LIQUIDITY_MINTED = 24
    INSUFFICIENT_LIQUIDITY_BURNED = 25
    INSUFFICIENT_TOKEN0_AMOUNT = 26
    INSUFFICIENT_TOKEN1_AMOUNT = 27
    INSUFFICIENT_BALANCE = 28

    # Economic rejections (40-49)
    SLIPPAGE_EXCEEDED = 40
    PRICE_IMPACT_TOO_HIGH = 41
    K_INVARIANT_VIOLATED = 42

    # Terminal / lifecycle (50-59)
    ALREADY_GRADUATED = 50
    STALE_QUOTE = 51
    TOKEN_NOT_FOUND = 52

    # Oracle (60-69)
    ORACLE_WINDOW_UNAVAILABLE = 60

    # Host layer (70-79)
    REENTRANCY = 70
    TRANSACTION_EXPIRED = 71

    # Fees (80-89)
    FEE_TOO_HIGH = 80
    INVALID_FEE_CONFIGURATION = 81

    @property
    def is_economic(self) -> bool:
        """Rejections caused by market conditions rather than bugs."""
        return self in (
            ErrorKind.SLIPPAGE_EXCEEDED,
            ErrorKind.PRICE_IMPACT_TOO_HIGH,
            ErrorKind.TRANSACTION_EXPIRED,
        )

    @property
    def is_arithmetic(self) -> bool:
        return self in (ErrorKind.OVERFLOW, ErrorKind.UNDERFLOW, ErrorKind.DIVISION_BY_ZERO)


class LaunchdexException(Exception):
    """Base exception for launchdex."""
    pass


class EngineError(LaunchdexException):
    """A typed engine failure. The operation that raised it had no effect."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.name.replace("_", " ").lower()
        super().__init__(f"{kind.name}: {self.message}")

    def __eq__(self, other):
        if isinstance(other, EngineError):
            return self.kind == other.kind
        return NotImplemented

    def __hash__(self):
        return hash(self.kind)


class ConfigurationError(LaunchdexException):
    """Configuration error."""
    pass
