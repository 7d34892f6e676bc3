"""Raw CSPICE bindings.

Low-level ctypes bindings that keep the C calling convention: output
buffer lengths and array capacities are explicit parameters. Output
pointers are allocated here and returned as a tuple.

Every function checks the CSPICE error state after the call and raises
:class:`~spicekit._kernel.types.SpiceError` if an error was signalled.
"""

import ctypes
from typing import Tuple

import numpy as np

from ._lazy_init import lazy_kernel
from .lib_loader import get_lib
from .types import (
    SpiceInt, SpiceDouble, SpiceBoolean, SpiceDLADescr,
    encode, decode, string_buffer, check_error,
)


__all__ = [
    # Body names
    'bodc2n',
    'bodn2c',
    # Time
    'et2lst',
    'timout',
    'str2et',
    # Kernel pool
    'furnsh',
    'unload',
    'kclear',
    'ktotal',
    'kdata',
    # DAS / DLA
    'dasopr',
    'dascls',
    'dlabfs',
    # DSK type 2
    'dskz02',
    'dskp02',
    'dskv02',
]


_c_str = ctypes.c_char_p
_p_int = ctypes.POINTER(SpiceInt)
_p_double = ctypes.POINTER(SpiceDouble)
_p_bool = ctypes.POINTER(SpiceBoolean)
_p_dladsc = ctypes.POINTER(SpiceDLADescr)


def _init_signatures(lib):
    """Apply argtypes/restype for every routine bound in this module."""
    signatures = {
        'bodc2n_c': [SpiceInt, SpiceInt, _c_str, _p_bool],
        'bodn2c_c': [_c_str, _p_int, _p_bool],
        'et2lst_c': [
            SpiceDouble, SpiceInt, SpiceDouble, _c_str, SpiceInt, SpiceInt,
            _p_int, _p_int, _p_int, _c_str, _c_str,
        ],
        'timout_c': [SpiceDouble, _c_str, SpiceInt, _c_str],
        'str2et_c': [_c_str, _p_double],
        'furnsh_c': [_c_str],
        'unload_c': [_c_str],
        'kclear_c': [],
        'ktotal_c': [_c_str, _p_int],
        'kdata_c': [
            SpiceInt, _c_str, SpiceInt, SpiceInt, SpiceInt,
            _c_str, _c_str, _c_str, _p_int, _p_bool,
        ],
        'dasopr_c': [_c_str, _p_int],
        'dascls_c': [SpiceInt],
        'dlabfs_c': [SpiceInt, _p_dladsc, _p_bool],
        'dskz02_c': [SpiceInt, _p_dladsc, _p_int, _p_int],
        'dskp02_c': [SpiceInt, _p_dladsc, SpiceInt, SpiceInt, _p_int, _p_int],
        'dskv02_c': [SpiceInt, _p_dladsc, SpiceInt, SpiceInt, _p_int, _p_double],
    }
    for name, argtypes in signatures.items():
        func = getattr(lib, name)
        func.argtypes = argtypes
        func.restype = None


# =============================================================================
# Body Names
# =============================================================================

@lazy_kernel
def bodc2n(code: int, lenout: int) -> Tuple[str, bool]:
    """Translate a body ID code into its name.

    Args:
        code: Integer ID code of the body.
        lenout: Length of the output name buffer, including the NUL.

    Returns:
        Tuple of (name, found). ``name`` is empty when not found.
    """
    lib = get_lib()
    name = string_buffer(lenout)
    found = SpiceBoolean()
    lib.bodc2n_c(code, lenout, name, ctypes.byref(found))
    check_error(lib, "bodc2n")
    return decode(name), bool(found.value)


@lazy_kernel
def bodn2c(name: str) -> Tuple[int, bool]:
    """Translate a body name into its ID code.

    Returns:
        Tuple of (code, found).
    """
    lib = get_lib()
    code = SpiceInt()
    found = SpiceBoolean()
    lib.bodn2c_c(encode(name), ctypes.byref(code), ctypes.byref(found))
    check_error(lib, "bodn2c")
    return code.value, bool(found.value)


# =============================================================================
# Time
# =============================================================================

@lazy_kernel
def et2lst(
    et: float,
    body: int,
    lon: float,
    lon_type: str,
    timlen: int,
    ampmlen: int,
) -> Tuple[int, int, int, str, str]:
    """Compute the local solar time at a longitude on a body.

    Args:
        et: Epoch in TDB seconds past J2000.
        body: ID code of the body.
        lon: Longitude of the surface point, radians.
        lon_type: ``"PLANETOCENTRIC"`` or ``"PLANETOGRAPHIC"``.
        timlen: Length of the ``time`` output buffer.
        ampmlen: Length of the ``ampm`` output buffer.

    Returns:
        Tuple of (hr, mn, sc, time, ampm).
    """
    lib = get_lib()
    hr = SpiceInt()
    mn = SpiceInt()
    sc = SpiceInt()
    time = string_buffer(timlen)
    ampm = string_buffer(ampmlen)
    lib.et2lst_c(
        et, body, lon, encode(lon_type), timlen, ampmlen,
        ctypes.byref(hr), ctypes.byref(mn), ctypes.byref(sc), time, ampm,
    )
    check_error(lib, "et2lst")
    return hr.value, mn.value, sc.value, decode(time), decode(ampm)


@lazy_kernel
def timout(et: float, pictur: str, lenout: int) -> str:
    """Format an epoch according to a format picture.

    Args:
        et: Epoch in TDB seconds past J2000.
        pictur: Format picture, e.g. ``"YYYY-MON-DD HR:MN:SC.### ::RND"``.
        lenout: Length of the output buffer, including the NUL.

    Returns:
        The formatted epoch.
    """
    lib = get_lib()
    output = string_buffer(lenout)
    lib.timout_c(et, encode(pictur), lenout, output)
    check_error(lib, "timout")
    return decode(output)


@lazy_kernel
def str2et(time: str) -> float:
    """Convert a time string to TDB seconds past J2000."""
    lib = get_lib()
    et = SpiceDouble()
    lib.str2et_c(encode(time), ctypes.byref(et))
    check_error(lib, "str2et")
    return et.value


# =============================================================================
# Kernel Pool
# =============================================================================

@lazy_kernel
def furnsh(path: str) -> None:
    """Load a kernel (or meta-kernel) into the kernel pool."""
    lib = get_lib()
    lib.furnsh_c(encode(path))
    check_error(lib, "furnsh")


@lazy_kernel
def unload(path: str) -> None:
    """Unload a kernel previously loaded with :func:`furnsh`."""
    lib = get_lib()
    lib.unload_c(encode(path))
    check_error(lib, "unload")


@lazy_kernel
def kclear() -> None:
    """Unload all kernels and clear the kernel pool."""
    lib = get_lib()
    lib.kclear_c()
    check_error(lib, "kclear")


@lazy_kernel
def ktotal(kind: str) -> int:
    """Count loaded kernels of the given kind (e.g. ``"ALL"``, ``"SPK"``)."""
    lib = get_lib()
    count = SpiceInt()
    lib.ktotal_c(encode(kind), ctypes.byref(count))
    check_error(lib, "ktotal")
    return count.value


@lazy_kernel
def kdata(
    which: int,
    kind: str,
    fillen: int,
    typlen: int,
    srclen: int,
) -> Tuple[str, str, str, int, bool]:
    """Return data for the n-th loaded kernel of a given kind.

    Args:
        which: Index of the kernel to fetch, starting at 0.
        kind: Kernel kind list, e.g. ``"ALL"`` or ``"SPK CK"``.
        fillen: Length of the ``file`` output buffer.
        typlen: Length of the ``filtyp`` output buffer.
        srclen: Length of the ``srcfil`` output buffer.

    Returns:
        Tuple of (file, filtyp, srcfil, handle, found).
    """
    lib = get_lib()
    file = string_buffer(fillen)
    filtyp = string_buffer(typlen)
    srcfil = string_buffer(srclen)
    handle = SpiceInt()
    found = SpiceBoolean()
    lib.kdata_c(
        which, encode(kind), fillen, typlen, srclen,
        file, filtyp, srcfil, ctypes.byref(handle), ctypes.byref(found),
    )
    check_error(lib, "kdata")
    return decode(file), decode(filtyp), decode(srcfil), handle.value, bool(found.value)


# =============================================================================
# DAS / DLA
# =============================================================================

@lazy_kernel
def dasopr(path: str) -> int:
    """Open a DAS file (e.g. a DSK) for reading and return its handle."""
    lib = get_lib()
    handle = SpiceInt()
    lib.dasopr_c(encode(path), ctypes.byref(handle))
    check_error(lib, "dasopr")
    return handle.value


@lazy_kernel
def dascls(handle: int) -> None:
    """Close a DAS file."""
    lib = get_lib()
    lib.dascls_c(handle)
    check_error(lib, "dascls")


@lazy_kernel
def dlabfs(handle: int) -> Tuple[SpiceDLADescr, bool]:
    """Begin a forward search for segments in a DLA file.

    Returns:
        Tuple of (descriptor of the first segment, found).
    """
    lib = get_lib()
    dladsc = SpiceDLADescr()
    found = SpiceBoolean()
    lib.dlabfs_c(handle, ctypes.byref(dladsc), ctypes.byref(found))
    check_error(lib, "dlabfs")
    return dladsc, bool(found.value)


# =============================================================================
# DSK Type 2
# =============================================================================

@lazy_kernel
def dskz02(handle: int, dladsc: SpiceDLADescr) -> Tuple[int, int]:
    """Return the vertex and plate counts of a type 2 DSK segment.

    Returns:
        Tuple of (nv, np).
    """
    lib = get_lib()
    nv = SpiceInt()
    np_ = SpiceInt()
    lib.dskz02_c(handle, ctypes.byref(dladsc), ctypes.byref(nv), ctypes.byref(np_))
    check_error(lib, "dskz02")
    return nv.value, np_.value


@lazy_kernel
def dskp02(handle: int, dladsc: SpiceDLADescr, start: int, room: int) -> np.ndarray:
    """Fetch triangular plates from a type 2 DSK segment.

    Args:
        handle: DSK file handle.
        dladsc: Segment descriptor.
        start: 1-based index of the first plate to fetch.
        room: Capacity of the output array, in plates.

    Returns:
        Array of shape ``(n, 3)`` and dtype ``int32`` holding 1-based vertex
        indices, where ``n <= room`` is the number of plates returned.
    """
    lib = get_lib()
    n = SpiceInt()
    plates = np.zeros((room, 3), dtype=np.int32)
    lib.dskp02_c(
        handle, ctypes.byref(dladsc), start, room,
        ctypes.byref(n), plates.ctypes.data_as(_p_int),
    )
    check_error(lib, "dskp02")
    return plates[:n.value]


@lazy_kernel
def dskv02(handle: int, dladsc: SpiceDLADescr, start: int, room: int) -> np.ndarray:
    """Fetch vertices from a type 2 DSK segment.

    Args:
        handle: DSK file handle.
        dladsc: Segment descriptor.
        start: 1-based index of the first vertex to fetch.
        room: Capacity of the output array, in vertices.

    Returns:
        Array of shape ``(n, 3)`` and dtype ``float64``.
    """
    lib = get_lib()
    n = SpiceInt()
    vertices = np.zeros((room, 3), dtype=np.float64)
    lib.dskv02_c(
        handle, ctypes.byref(dladsc), start, room,
        ctypes.byref(n), vertices.ctypes.data_as(_p_double),
    )
    check_error(lib, "dskv02")
    return vertices[:n.value]
