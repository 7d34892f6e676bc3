"""C type definitions and error handling for CSPICE bindings.

Maps Python types to C types for ctypes bindings and bridges the CSPICE
error subsystem (``failed_c`` / ``getmsg_c`` / ``reset_c``) to exceptions.
"""

import ctypes
import logging
from typing import Any, Optional


__all__ = [
    'SpiceInt', 'SpiceDouble', 'SpiceBoolean', 'SpiceChar',
    'SpiceDLADescr', 'SpiceError',
    'encode', 'decode', 'string_buffer',
    'init_error_handling', 'check_error', 'get_last_error', 'clear_error',
]


logger = logging.getLogger(__name__)


# =============================================================================
# C Type Aliases
# =============================================================================

# CSPICE types (64-bit builds)
SpiceInt = ctypes.c_int
SpiceDouble = ctypes.c_double
SpiceBoolean = ctypes.c_int
SpiceChar = ctypes.c_char

# Buffer sizes of the error subsystem
SHORT_MSG_LEN = 26
LONG_MSG_LEN = 1841


class SpiceDLADescr(ctypes.Structure):
    """DLA segment descriptor (``SpiceDLADescr``).

    Locates one segment of a DAS-based file such as a DSK. Obtained from
    :func:`spicekit.dlabfs` and passed by reference to the DSK routines.
    """

    _fields_ = [
        ('bwdptr', SpiceInt),
        ('fwdptr', SpiceInt),
        ('ibase', SpiceInt),
        ('isize', SpiceInt),
        ('dbase', SpiceInt),
        ('dsize', SpiceInt),
        ('cbase', SpiceInt),
        ('csize', SpiceInt),
    ]

    def __repr__(self) -> str:
        fields = ', '.join(f"{name}={getattr(self, name)}" for name, _ in self._fields_)
        return f"SpiceDLADescr({fields})"


# =============================================================================
# String Conversion
# =============================================================================

def encode(value: str) -> bytes:
    """Encode a Python string for a ``ConstSpiceChar *`` parameter."""
    return value.encode('utf-8')


def decode(buffer: Any) -> str:
    """Decode a NUL-terminated output buffer to ``str``."""
    return buffer.value.decode('utf-8').rstrip()


def string_buffer(length: int) -> Any:
    """Allocate a writable ``SpiceChar`` buffer of ``length`` bytes."""
    return ctypes.create_string_buffer(length)


# =============================================================================
# Error Handling
# =============================================================================

class SpiceError(Exception):
    """Error signalled by the CSPICE toolkit.

    Attributes:
        short: Short error message, e.g. ``SPICE(NOSUCHFILE)``.
        long: Long, human readable explanation.
        routine: Name of the wrapped routine that failed.
    """

    def __init__(self, short: str, long: str = "", routine: Optional[str] = None):
        self.short = short
        self.long = long
        self.routine = routine
        message = f"{routine} failed: {short}" if routine else short
        if long:
            message = f"{message}\n{long}"
        super().__init__(message)


def init_error_handling(lib: Any, action: Optional[str] = None, report: Optional[str] = None) -> None:
    """Configure the CSPICE error subsystem so errors never abort the process.

    Sets the error action (``erract_c``) and the error output selection
    (``errprt_c``). Called once by the loader after the library is opened.

    Args:
        lib: Loaded library handle.
        action: Error action, defaults to the configured ``error_action``.
        report: Error message selection, defaults to ``error_print``.
    """
    from .._config import config

    action = action or config.error_action
    report = report or config.error_print

    lib.erract_c.argtypes = [ctypes.c_char_p, SpiceInt, ctypes.c_char_p]
    lib.erract_c.restype = None
    lib.errprt_c.argtypes = [ctypes.c_char_p, SpiceInt, ctypes.c_char_p]
    lib.errprt_c.restype = None
    lib.failed_c.argtypes = []
    lib.failed_c.restype = SpiceBoolean
    lib.getmsg_c.argtypes = [ctypes.c_char_p, SpiceInt, ctypes.c_char_p]
    lib.getmsg_c.restype = None
    lib.reset_c.argtypes = []
    lib.reset_c.restype = None

    action_buf = ctypes.create_string_buffer(encode(action), 32)
    lib.erract_c(b"SET", 32, action_buf)
    report_buf = ctypes.create_string_buffer(encode(report), 32)
    lib.errprt_c(b"SET", 32, report_buf)
    logger.debug("CSPICE error action=%s, report=%s", action, report)


def get_last_error(lib: Any) -> Optional[tuple]:
    """Get the pending CSPICE error, if any.

    Returns:
        Tuple of (short, long) messages, or None if no error is signalled.
    """
    if not lib.failed_c():
        return None

    short = string_buffer(SHORT_MSG_LEN)
    lib.getmsg_c(b"SHORT", SHORT_MSG_LEN, short)
    long = string_buffer(LONG_MSG_LEN)
    lib.getmsg_c(b"LONG", LONG_MSG_LEN, long)
    return decode(short), decode(long)


def clear_error(lib: Any) -> None:
    """Clear error state in CSPICE."""
    lib.reset_c()


def check_error(lib: Any, operation: str = "CSPICE operation") -> None:
    """Raise if the last call signalled an error.

    The error state is reset before raising so the next call starts clean.

    Args:
        lib: Loaded library handle.
        operation: Routine name for the error message.

    Raises:
        SpiceError: If CSPICE reports a failure.
    """
    error = get_last_error(lib)
    if error is None:
        return

    clear_error(lib)
    short, long = error
    raise SpiceError(short, long, operation)
