"""
spicekit - idiomatic access to the NAIF CSPICE toolkit

Thin ergonomics layer over ctypes bindings to CSPICE:
- String inputs without explicit lengths
- Array outputs sized from the data (numpy arrays)
- String outputs with a configurable default buffer length
- CSPICE errors raised as SpiceError instead of aborting the process
- SpiceLock for exclusive access from threaded code

Modules:
- neat: ergonomic wrappers (bodc2n, et2lst, timout, dskp02, dskv02, kdata)
- lock: SpiceLock guard
- _kernel.raw: C-style bindings, explicit buffer lengths

Example:
    >>> import spicekit
    >>> spicekit.furnsh("naif0012.tls")
    >>> spicekit.bodc2n(399)
    ('EARTH', True)
    >>> spicekit.timout(0.0, "YYYY-MON-DD HR:MN")
    '2000-JAN-01 11:58'
"""

__version__ = '0.1.0'

from . import neat
from ._config import MAX_LEN_OUT, SpiceConfig, config, get_config
from ._kernel.lib_loader import LibraryNotFoundError, get_lib
from ._kernel.raw import (
    bodn2c,
    dascls,
    dasopr,
    dlabfs,
    dskz02,
    furnsh,
    kclear,
    ktotal,
    str2et,
    unload,
)
from ._kernel.types import SpiceDLADescr, SpiceError
from .lock import SpiceLock, SpiceLockError
from .neat import bodc2n, dskp02, dskv02, et2lst, kdata, timout

__all__ = [
    # Version
    '__version__',

    # Modules
    'neat',

    # Ergonomic wrappers
    'bodc2n',
    'et2lst',
    'timout',
    'dskp02',
    'dskv02',
    'kdata',

    # Routines re-exported from the raw layer
    'bodn2c',
    'str2et',
    'furnsh',
    'unload',
    'kclear',
    'ktotal',
    'dasopr',
    'dascls',
    'dlabfs',
    'dskz02',

    # Types
    'SpiceDLADescr',

    # Errors
    'SpiceError',
    'SpiceLockError',
    'LibraryNotFoundError',

    # Locking
    'SpiceLock',

    # Configuration
    'MAX_LEN_OUT',
    'SpiceConfig',
    'config',
    'get_config',
    'get_lib',
]
