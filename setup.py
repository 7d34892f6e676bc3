"""
Setup script for spicekit

The main configuration is in pyproject.toml. This script only handles:
1. Locating a prebuilt shared CSPICE library (CSPICE_DIR)
2. Copying it into src/spicekit/libs/ before packaging

CSPICE is not built here. Without CSPICE_DIR the package installs without a
bundled library and looks for one at runtime (see spicekit/_kernel/lib_loader.py).
"""

import os
import sys
import shutil
from pathlib import Path
from setuptools import setup
from setuptools.command.build_py import build_py
from setuptools.command.develop import develop


TARGET_DIR = Path("src/spicekit/libs")


def _lib_file_name():
    if os.name == 'nt':  # Windows
        return "cspice.dll"
    elif sys.platform == 'darwin':  # macOS
        return "libcspice.dylib"
    else:  # Linux
        return "libcspice.so"


def copy_cspice_lib():
    """Copy libcspice from $CSPICE_DIR (or $CSPICE_DIR/lib) into the package."""
    cspice_dir = os.environ.get("CSPICE_DIR")
    if not cspice_dir:
        print("CSPICE_DIR not set; no CSPICE library will be bundled")
        return False

    lib_name = _lib_file_name()
    for candidate in (Path(cspice_dir) / "lib" / lib_name, Path(cspice_dir) / lib_name):
        if candidate.exists():
            TARGET_DIR.mkdir(parents=True, exist_ok=True)
            shutil.copy2(candidate, TARGET_DIR / lib_name)
            print(f"✓ Copied {candidate} -> {TARGET_DIR / lib_name}")
            return True

    print("=" * 60)
    print(f"WARNING: {lib_name} not found under {cspice_dir}")
    print("=" * 60)
    print("CSPICE ships a static archive; build a shared library first, e.g.:")
    print("  gcc -shared -o libcspice.so -Wl,--whole-archive cspice.a -Wl,--no-whole-archive -lm")
    print("=" * 60)
    return False


class BuildPyWithLibs(build_py):
    """Custom build command that bundles libcspice into the package."""

    def run(self):
        copy_cspice_lib()
        super().run()


class DevelopWithLibs(develop):
    """Custom develop command that bundles libcspice for editable installs."""

    def run(self):
        copy_cspice_lib()
        super().run()


setup(
    cmdclass={
        "build_py": BuildPyWithLibs,
        "develop": DevelopWithLibs,
    },
    zip_safe=False,  # Cannot be zipped due to shared libraries
)
