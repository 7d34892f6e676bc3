"""spicekit Private Kernel Bindings (_kernel).

This is a private package that provides low-level C-style bindings to CSPICE.

Architecture:
    - Direct ctypes bindings to libcspice
    - Minimal Python wrapper (close to C API)
    - Type conversions and error handling
    - Used as foundation for the ergonomic layer (spicekit.neat)

Modules:
    - lib_loader: Dynamic library loading
    - types: C type definitions and error handling
    - raw: One binding per CSPICE routine, C argument lists kept

Usage (Internal only):
    >>> from spicekit._kernel import raw
    >>> raw.bodc2n(399, 256)
    ('EARTH', True)
"""

from . import lib_loader
from . import types
from . import raw

__all__ = [
    'lib_loader',
    'types',
    'raw',
]
