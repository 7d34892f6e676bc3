"""Ergonomic wrappers over the raw CSPICE bindings.

The raw layer mirrors the C calling convention. The functions here drop the
parts of it that have no meaning in Python:

+ string inputs are passed without their length;
+ array outputs are sized from the data itself instead of from a caller
  supplied count;
+ string outputs use a default buffer length (``config.max_len_out``, 256
  unless configured otherwise).

The raw interface stays available in :mod:`spicekit._kernel.raw`.
"""

from typing import Tuple

import numpy as np

from ._config import config
from ._kernel import raw
from ._kernel.types import SpiceDLADescr, encode


__all__ = ['bodc2n', 'et2lst', 'timout', 'dskp02', 'dskv02', 'kdata']


def bodc2n(code: int) -> Tuple[str, bool]:
    """Translate the SPICE integer code of a body into a common name for that body.

    Example:
        >>> bodc2n(399)
        ('EARTH', True)

    See :func:`spicekit._kernel.raw.bodc2n` for the raw interface.
    """
    return raw.bodc2n(code, config.max_len_out)


def et2lst(et: float, body_code: int, lon: float, lon_type: str) -> Tuple[int, int, int, str, str]:
    """Compute the local solar time for a given ephemeris epoch ``et`` for an
    object on the surface of a body at a specified longitude.

    Args:
        et: Epoch in TDB seconds past J2000.
        body_code: ID code of the body.
        lon: Longitude of the surface point, radians.
        lon_type: ``"PLANETOCENTRIC"`` or ``"PLANETOGRAPHIC"``.

    Returns:
        Tuple of (hr, mn, sc, time, ampm), e.g.
        ``(6, 0, 0, '06:00:00', '06:00:00 A.M.')``.

    See :func:`spicekit._kernel.raw.et2lst` for the raw interface.
    """
    length = config.max_len_out
    return raw.et2lst(et, body_code, lon, lon_type, length, length)


def timout(et: float, pictur: str) -> str:
    """Convert an epoch in TDB seconds past J2000 to a string formatted to the
    specifications of a format picture.

    The output buffer is sized from the encoded picture, in bytes.

    See :func:`spicekit._kernel.raw.timout` for the raw interface.
    """
    return raw.timout(et, pictur, len(encode(pictur)) + 1)


def dskp02(handle: int, dladsc: SpiceDLADescr) -> np.ndarray:
    """Fetch all triangular plates from a type 2 DSK segment.

    Returns:
        ``(np, 3)`` array of 1-based vertex indices.

    See :func:`spicekit._kernel.raw.dskp02` for the raw interface.
    """
    _nv, np_ = raw.dskz02(handle, dladsc)
    return raw.dskp02(handle, dladsc, 1, np_)


def dskv02(handle: int, dladsc: SpiceDLADescr) -> np.ndarray:
    """Fetch all vertices from a type 2 DSK segment.

    Returns:
        ``(nv, 3)`` array of vertex coordinates, km.

    See :func:`spicekit._kernel.raw.dskv02` for the raw interface.
    """
    nv, _np = raw.dskz02(handle, dladsc)
    return raw.dskv02(handle, dladsc, 1, nv)


def kdata(which: int, kind: str) -> Tuple[str, str, str, int, bool]:
    """Return data for the n-th kernel that is among a list of specified
    kernel types.

    Returns:
        Tuple of (file, filtyp, srcfil, handle, found).

    See :func:`spicekit._kernel.raw.kdata` for the raw interface.
    """
    length = config.max_len_out
    return raw.kdata(which, kind, length, length, length)
