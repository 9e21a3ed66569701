"""
Launchdex Pricing Engine Package

Core imports are lazily loaded so that importing the package does not
configure logging or read configuration files.
For direct module access, import from submodules:

    from launchdex.exchange.amm import get_amount_out
    from launchdex.exchange.bonding_curve import new_curve
    from launchdex.exceptions import EngineError, ErrorKind
"""

__version__ = "1.0.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'EngineError':
        from .exceptions import EngineError
        return EngineError
    elif name == 'ErrorKind':
        from .exceptions import ErrorKind
        return ErrorKind
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'launchdex' has no attribute {name!r}")

__all__ = ['EngineError', 'ErrorKind', 'load_config', '__version__']
