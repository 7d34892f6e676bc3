"""Dynamic library loader for CSPICE.

This module handles platform-specific library loading with lazy initialization.
No external dependencies required.
"""

import ctypes
import ctypes.util
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional


__all__ = ['get_lib', 'loaded_lib', 'find_library', 'clear_cache', 'LibraryNotFoundError']


logger = logging.getLogger(__name__)


class LibraryNotFoundError(Exception):
    """Raised when the CSPICE library cannot be found or loaded."""
    pass


# Global library cache
_lib_cache = {}


def _lib_name() -> str:
    """Platform-specific shared library file name."""
    if sys.platform == 'win32':
        return 'cspice.dll'
    elif sys.platform == 'darwin':
        return 'libcspice.dylib'
    else:  # Linux
        return 'libcspice.so'


def _search_paths(library_path: Optional[str] = None) -> List[Path]:
    """Collect candidate directories, most specific first."""
    search_paths = []

    # 1. Explicit path (configuration)
    if library_path:
        path = Path(library_path)
        search_paths.append(path if path.is_dir() else path.parent)

    # 2. Environment variable
    if 'SPICEKIT_LIBRARY_PATH' in os.environ:
        env_path = Path(os.environ['SPICEKIT_LIBRARY_PATH'])
        if env_path.is_dir():
            search_paths.append(env_path)
        else:
            search_paths.append(env_path.parent)

    # 3. Package directory: src/spicekit/libs/
    package_dir = Path(__file__).parent.parent / 'libs'
    if package_dir.exists():
        search_paths.append(package_dir)

    # 4. Common install prefixes
    for prefix in ('/usr/local/lib', '/usr/lib', '/opt/cspice/lib'):
        path = Path(prefix)
        if path.exists():
            search_paths.append(path)

    return search_paths


def find_library(library_path: Optional[str] = None) -> Optional[Path]:
    """Search for the CSPICE shared library.

    Search order:
        1. ``library_path`` argument (file or directory)
        2. Environment variable: SPICEKIT_LIBRARY_PATH
        3. Package directory: src/spicekit/libs/
        4. Common install prefixes

    Args:
        library_path: Optional explicit file or directory.

    Returns:
        Path to library file, or None if not found.
    """
    if library_path and Path(library_path).is_file():
        return Path(library_path)

    env_path = os.environ.get('SPICEKIT_LIBRARY_PATH')
    if env_path and Path(env_path).is_file():
        return Path(env_path)

    lib_name = _lib_name()
    for search_path in _search_paths(library_path):
        lib_path = search_path / lib_name
        logger.debug("Looking for %s in %s", lib_name, search_path)
        if lib_path.exists():
            return lib_path

    return None


def get_lib(library_path: Optional[str] = None) -> ctypes.CDLL:
    """Get CSPICE library handle with lazy initialization.

    This function handles:
        - Library discovery
        - Loading and caching
        - Falling back to the system linker search (ctypes.util.find_library)

    Args:
        library_path: Force a specific file or directory, or None to use
            the configured / discovered location.

    Returns:
        ctypes.CDLL library handle.

    Raises:
        LibraryNotFoundError: If library cannot be found.

    Example:
        >>> lib = get_lib()
        >>> lib.ktotal_c
    """
    if library_path is None:
        from .._config import config
        library_path = config.library_path

    # Check cache
    if 'cspice' in _lib_cache:
        return _lib_cache['cspice']

    # Find library
    lib_path = find_library(library_path)
    if lib_path is None:
        system_name = ctypes.util.find_library('cspice')
        if system_name is None:
            raise LibraryNotFoundError(
                "Cannot find CSPICE library. "
                "Please install CSPICE as a shared library or set SPICEKIT_LIBRARY_PATH."
            )
        lib_path = Path(system_name)

    # Load library
    try:
        lib = ctypes.CDLL(str(lib_path))
    except OSError as e:
        logger.warning("Failed to load %s: %s", lib_path, e)
        raise LibraryNotFoundError(f"Failed to load library from {lib_path}: {e}") from e

    logger.debug("Loaded CSPICE from %s", lib_path)

    from .types import init_error_handling
    init_error_handling(lib)

    _lib_cache['cspice'] = lib
    return lib


def clear_cache() -> None:
    """Forget the cached library handle so the next call reloads it."""
    _lib_cache.clear()


def loaded_lib() -> Optional[ctypes.CDLL]:
    """The cached library handle, or None if nothing has been loaded yet."""
    return _lib_cache.get('cspice')
