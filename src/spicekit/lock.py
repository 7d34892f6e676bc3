"""
Exclusive access to the CSPICE toolkit.

CSPICE keeps its kernel pool, file table and error state in process-wide
globals, so only one thread may talk to it at a time. ``SpiceLock`` is a
guard over a single process-wide mutex; the toolkit functions are exposed
as methods of the guard so holding it is the way to reach them.

Example:
    >>> from spicekit import SpiceLock
    >>> with SpiceLock.acquire() as sl:
    ...     sl.furnsh("naif0012.tls")
    ...     sl.timout(0.0, "YYYY-MON-DD")
    '2000-JAN-01'
"""

from __future__ import annotations

import logging
import threading
from functools import wraps
from typing import Optional

from . import neat
from ._kernel import raw


__all__ = ['SpiceLock', 'SpiceLockError']


logger = logging.getLogger(__name__)


class SpiceLockError(Exception):
    """Raised when the lock is unavailable, misused or already released."""
    pass


_MUTEX = threading.Lock()
_TOKEN = object()


class SpiceLock:
    """Guard granting exclusive use of CSPICE until released."""

    def __init__(self, _token: object = None):
        if _token is not _TOKEN:
            raise SpiceLockError(
                "SpiceLock cannot be instantiated directly; "
                "use SpiceLock.try_acquire() or SpiceLock.acquire()"
            )
        self._held = True
        self._thread = threading.get_ident()

    @classmethod
    def try_acquire(cls) -> "SpiceLock":
        """Acquire the lock without blocking.

        Raises:
            SpiceLockError: If another guard currently holds it.
        """
        if not _MUTEX.acquire(blocking=False):
            raise SpiceLockError("SpiceLock is already acquired")
        logger.debug("SpiceLock acquired by thread %s", threading.get_ident())
        return cls(_TOKEN)

    @classmethod
    def acquire(cls, timeout: Optional[float] = None) -> "SpiceLock":
        """Acquire the lock, blocking until it is free.

        Args:
            timeout: Seconds to wait, or None to wait forever.

        Raises:
            SpiceLockError: If the timeout expires first.
        """
        if not _MUTEX.acquire(timeout=-1 if timeout is None else timeout):
            raise SpiceLockError(f"Timed out after {timeout}s waiting for SpiceLock")
        logger.debug("SpiceLock acquired by thread %s", threading.get_ident())
        return cls(_TOKEN)

    @staticmethod
    def locked() -> bool:
        """Whether any guard currently holds the lock."""
        return _MUTEX.locked()

    @property
    def held(self) -> bool:
        return self._held

    def release(self) -> None:
        """Release the lock.

        Raises:
            SpiceLockError: If this guard was already released.
        """
        if not self._held:
            raise SpiceLockError("SpiceLock already released")
        self._held = False
        _MUTEX.release()
        logger.debug("SpiceLock released by thread %s", threading.get_ident())

    def _check_held(self) -> None:
        if not self._held:
            raise SpiceLockError("SpiceLock has been released")

    def __enter__(self) -> "SpiceLock":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._held:
            self.release()
        return False

    def __del__(self):
        # a dropped guard must not keep the process-wide mutex
        if getattr(self, "_held", False):
            self.release()

    def __repr__(self) -> str:
        state = "held" if self._held else "released"
        return f"<SpiceLock {state}>"


def _guarded(func):
    """Expose ``func`` as a SpiceLock method that requires the guard be held."""
    @wraps(func)
    def method(self, *args, **kwargs):
        self._check_held()
        return func(*args, **kwargs)
    return method


for _func in (
    neat.bodc2n, neat.et2lst, neat.timout, neat.dskp02, neat.dskv02, neat.kdata,
    raw.bodn2c, raw.str2et, raw.furnsh, raw.unload, raw.kclear, raw.ktotal,
    raw.dasopr, raw.dascls, raw.dlabfs, raw.dskz02,
):
    setattr(SpiceLock, _func.__name__, _guarded(_func))
del _func
