"""
Pytest configuration and shared fixtures for spicekit tests.

Most tests run against ``FakeCSPICE``, a pure-Python stand-in for libcspice
that writes into the ctypes buffers the bindings hand it. It is injected into
the loader cache, so the bindings cannot tell it from the real library.
"""

import math
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from spicekit._kernel import lib_loader


J2000 = datetime(2000, 1, 1, 12, 0, 0)


# =============================================================================
# Fake Library
# =============================================================================

def _deref(arg):
    """Unwrap a ``ctypes.byref`` argument to the object it refers to."""
    return getattr(arg, "_obj", arg)


def _text(arg):
    return arg.decode("utf-8") if isinstance(arg, bytes) else arg


class FakeRoutine:
    """Callable standing in for a ctypes foreign function."""

    def __init__(self, name, impl):
        self.__name__ = name
        self.impl = impl
        self.calls = []
        self.argtypes = None
        self.restype = None

    def __call__(self, *args):
        self.calls.append(args)
        return self.impl(*args)


class FakeCSPICE:
    """Minimal in-memory model of the CSPICE routines spicekit binds."""

    ROUTINES = (
        "bodc2n", "bodn2c", "et2lst", "timout", "str2et",
        "furnsh", "unload", "kclear", "ktotal", "kdata",
        "dasopr", "dascls", "dlabfs", "dskz02", "dskp02", "dskv02",
        "erract", "errprt", "failed", "getmsg", "reset",
    )

    def __init__(self):
        self.bodies = {10: "SUN", 199: "MERCURY", 301: "MOON", 399: "EARTH", 499: "MARS"}
        # path -> kernel type, for files that "exist" on disk
        self.available = {}
        # loaded kernels: [file, filtyp, srcfil, handle]
        self.loaded = []
        # DSK handle -> (vertices, plates)
        self.segments = {}
        self.open_handles = set()
        self.error = None
        self._next_handle = 1

        for name in self.ROUTINES:
            setattr(self, f"{name}_c", FakeRoutine(f"{name}_c", getattr(self, f"_{name}")))

    # -- helpers -------------------------------------------------------------

    def signal(self, short, long=""):
        if self.error is None:
            self.error = (short, long)

    def add_dsk(self, path, vertices, plates):
        self.available[path] = "DSK"
        self.segments[path] = (
            np.asarray(vertices, dtype=np.float64),
            np.asarray(plates, dtype=np.int32),
        )

    @staticmethod
    def _write(buffer, value, lenout):
        buffer.value = value.encode("utf-8")[:max(lenout - 1, 0)]

    # -- body names ----------------------------------------------------------

    def _bodc2n(self, code, lenout, name, found):
        if code in self.bodies:
            self._write(name, self.bodies[code], lenout)
            _deref(found).value = 1
        else:
            _deref(found).value = 0

    def _bodn2c(self, name, code, found):
        lookup = {v: k for k, v in self.bodies.items()}
        key = _text(name).strip().upper()
        if key in lookup:
            _deref(code).value = lookup[key]
            _deref(found).value = 1
        else:
            _deref(found).value = 0

    # -- time ----------------------------------------------------------------

    def _et2lst(self, et, body, lon, lon_type, timlen, ampmlen, hr, mn, sc, time, ampm):
        if _text(lon_type) not in ("PLANETOCENTRIC", "PLANETOGRAPHIC"):
            self.signal("SPICE(UNKNOWNSYSTEM)", f"The longitude type {_text(lon_type)} is not recognized.")
            return
        seconds = int(round((lon / (2 * math.pi)) * 86400 + 43200 + et)) % 86400
        h, rest = divmod(seconds, 3600)
        m, s = divmod(rest, 60)
        _deref(hr).value = h
        _deref(mn).value = m
        _deref(sc).value = s
        self._write(time, f"{h:02d}:{m:02d}:{s:02d}", timlen)
        half = "A.M." if h < 12 else "P.M."
        self._write(ampm, f"{(h % 12) or 12:02d}:{m:02d}:{s:02d} {half}", ampmlen)

    def _timout(self, et, pictur, lenout, output):
        moment = J2000 + timedelta(seconds=et)
        text = _text(pictur)
        for token, value in (
            ("YYYY", f"{moment.year:04d}"),
            ("MON", moment.strftime("%b").upper()),
            ("DD", f"{moment.day:02d}"),
            ("HR", f"{moment.hour:02d}"),
            ("MN", f"{moment.minute:02d}"),
            ("SC", f"{moment.second:02d}"),
        ):
            text = text.replace(token, value)
        self._write(output, text, lenout)

    def _str2et(self, string, et):
        try:
            moment = datetime.strptime(_text(string).strip(), "%Y-%m-%dT%H:%M:%S")
        except ValueError:
            self.signal("SPICE(UNPARSEDTIME)", f"Could not parse {_text(string)!r}.")
            return
        _deref(et).value = (moment - J2000).total_seconds()

    # -- kernel pool ---------------------------------------------------------

    def _furnsh(self, path):
        path = _text(path)
        if path not in self.available:
            self.signal("SPICE(NOSUCHFILE)", f"The file '{path}' could not be located.")
            return
        filtyp = self.available[path]
        handle = 0
        if filtyp != "TEXT":
            handle = self._next_handle
            self._next_handle += 1
        self.loaded.append([path, filtyp, "", handle])

    def _unload(self, path):
        path = _text(path)
        self.loaded = [k for k in self.loaded if k[0] != path]

    def _kclear(self):
        self.loaded = []

    def _matching(self, kind):
        kinds = _text(kind).upper().split()
        if "ALL" in kinds:
            return list(self.loaded)
        return [k for k in self.loaded if k[1] in kinds]

    def _ktotal(self, kind, count):
        _deref(count).value = len(self._matching(kind))

    def _kdata(self, which, kind, fillen, typlen, srclen, file, filtyp, srcfil, handle, found):
        matching = self._matching(kind)
        if 0 <= which < len(matching):
            path, typ, src, hnd = matching[which]
            self._write(file, path, fillen)
            self._write(filtyp, typ, typlen)
            self._write(srcfil, src, srclen)
            _deref(handle).value = hnd
            _deref(found).value = 1
        else:
            _deref(found).value = 0

    # -- DAS / DLA / DSK -----------------------------------------------------

    def _dasopr(self, path, handle):
        path = _text(path)
        if path not in self.segments:
            self.signal("SPICE(FILENOTFOUND)", f"The file '{path}' was not found.")
            return
        new = self._next_handle
        self._next_handle += 1
        self.segments[new] = self.segments[path]
        self.open_handles.add(new)
        _deref(handle).value = new

    def _dascls(self, handle):
        self.open_handles.discard(handle)

    def _dlabfs(self, handle, dladsc, found):
        if handle not in self.segments:
            _deref(found).value = 0
            return
        descr = _deref(dladsc)
        descr.ibase, descr.isize, descr.dbase, descr.dsize = 0, 12, 0, 24
        _deref(found).value = 1

    def _dskz02(self, handle, dladsc, nv, np_):
        vertices, plates = self.segments[handle]
        _deref(nv).value = len(vertices)
        _deref(np_).value = len(plates)

    def _fetch(self, rows, start, room, n, out):
        if room <= 0:
            self.signal("SPICE(VALUEOUTOFRANGE)", f"ROOM was {room}; must be positive.")
            return
        chunk = rows[start - 1:start - 1 + room]
        for i, row in enumerate(chunk):
            for j in range(3):
                out[3 * i + j] = row[j].item()
        _deref(n).value = len(chunk)

    def _dskp02(self, handle, dladsc, start, room, n, plates):
        self._fetch(self.segments[handle][1], start, room, n, plates)

    def _dskv02(self, handle, dladsc, start, room, n, vertices):
        self._fetch(self.segments[handle][0], start, room, n, vertices)

    # -- error subsystem -----------------------------------------------------

    def _erract(self, op, lenout, action):
        self.action = _deref(action).value

    def _errprt(self, op, lenout, report):
        self.report = _deref(report).value

    def _failed(self):
        return 1 if self.error else 0

    def _getmsg(self, option, lenout, msg):
        short, long = self.error or ("", "")
        self._write(msg, short if _text(option) == "SHORT" else long, lenout)

    def _reset(self):
        self.error = None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_lib(monkeypatch):
    """Install a FakeCSPICE as the loaded library."""
    fake = FakeCSPICE()
    monkeypatch.setitem(lib_loader._lib_cache, "cspice", fake)
    return fake


@pytest.fixture
def dsk_segment(fake_lib):
    """A tetrahedron DSK: 4 vertices, 4 plates, opened and searched."""
    vertices = [
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ]
    plates = [
        [1, 3, 2],
        [1, 2, 4],
        [2, 3, 4],
        [3, 1, 4],
    ]
    fake_lib.add_dsk("tetra.bds", vertices, plates)

    from spicekit import dasopr, dlabfs
    handle = dasopr("tetra.bds")
    dladsc, found = dlabfs(handle)
    assert found
    return handle, dladsc, np.array(vertices), np.array(plates, dtype=np.int32)


@pytest.fixture(scope="session")
def real_kernels():
    """Path of a meta-kernel for tests against the real CSPICE library."""
    path = os.environ.get("SPICEKIT_TEST_KERNELS")
    if not path:
        pytest.skip("SPICEKIT_TEST_KERNELS not set")
    return path


@pytest.fixture
def real_lib(real_kernels, monkeypatch):
    """Load the real CSPICE library with the test kernels furnished."""
    monkeypatch.setattr(lib_loader, "_lib_cache", {})
    try:
        lib = lib_loader.get_lib()
    except lib_loader.LibraryNotFoundError as e:
        pytest.skip(f"CSPICE not available: {e}")

    import spicekit
    spicekit.furnsh(real_kernels)
    yield lib
    spicekit.kclear()

