"""
Scope-bound reentrancy guard.

A host wraps the engine call and the value transfers that follow it in
``with guard:``. A nested entry while the guard is held fails with
REENTRANCY, and the lock is released on every exit path, including when the
guarded body raises.
"""

from __future__ import annotations

import logging

from ..exceptions import EngineError, ErrorKind

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Boolean lock usable as a context manager."""

    def __init__(self, name: str = ""):
        self.name = name
        self._locked: bool = False

    @property
    def is_locked(self) -> bool:
        return self._locked

    def _acquire_lock(self) -> None:
        if self._locked:
            logger.warning("Reentrant call rejected on %s", self.name or "guard")
            raise EngineError(ErrorKind.REENTRANCY, f"{self.name or 'guard'} is locked")
        self._locked = True

    def _release_lock(self) -> None:
        self._locked = False

    def locked(self) -> "ReentrancyGuard":
        return self

    def __enter__(self) -> "ReentrancyGuard":
        self._acquire_lock()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._release_lock()
        return False
