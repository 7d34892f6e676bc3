"""
spicekit Config - Runtime Configuration

Holds the knobs the ergonomic layer needs: default output-buffer length,
library location and the CSPICE error-subsystem settings. Buffer length and
library location can be overridden per thread inside a ``config.local(...)``
block; the error settings are process-wide.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)


# Default length of string output buffers, NUL included
DEFAULT_MAX_LEN_OUT = 256


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, value)
        return default


MAX_LEN_OUT = _env_int("SPICEKIT_MAX_LEN_OUT", DEFAULT_MAX_LEN_OUT)


# =============================================================================
# Configuration Class
# =============================================================================

@dataclass
class SpiceConfig:
    """Settings consulted by the loader and the ergonomic adapters.

    ``error_action`` and ``error_print`` are process-wide: CSPICE keeps a single
    error state. Setting them through the manager re-applies them to an
    already loaded library, and ``config.local(...)`` does not accept them.
    """
    max_len_out: int = MAX_LEN_OUT
    library_path: Optional[str] = None
    error_action: str = "RETURN"   # erract_c action; ABORT would kill the interpreter
    error_print: str = "NONE"      # errprt_c selection


# Fields that map onto CSPICE global state
PROCESS_WIDE_FIELDS = ("error_action", "error_print")


def _default_config() -> SpiceConfig:
    """Defaults, with the library location taken from the environment."""
    return SpiceConfig(library_path=os.environ.get("SPICEKIT_LIBRARY_PATH"))


# =============================================================================
# Global Configuration Manager
# =============================================================================

class SpiceConfigManager:
    """
    Global configuration manager for spicekit.

    Provides thread-local configuration with context manager support.

    Example:
        # Global configuration
        spicekit.config.max_len_out = 512

        # Local configuration (context manager)
        with spicekit.config.local(max_len_out=1024):
            name, found = spicekit.bodc2n(399)
        # Back to global config
    """

    def __init__(self):
        self._global = _default_config()

        # Thread-local storage for context overrides
        self._local = threading.local()

    @property
    def current(self) -> SpiceConfig:
        """Effective configuration for the calling thread."""
        override = getattr(self._local, "config", None)
        if override is not None:
            return override
        return self._global

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def max_len_out(self) -> int:
        """Default output-buffer length."""
        return self.current.max_len_out

    @max_len_out.setter
    def max_len_out(self, value: int):
        self._global.max_len_out = int(value)

    @property
    def library_path(self) -> Optional[str]:
        """Explicit CSPICE library file or directory."""
        return self.current.library_path

    @library_path.setter
    def library_path(self, value: Optional[str]):
        self._global.library_path = value

    @property
    def error_action(self) -> str:
        return self.current.error_action

    @error_action.setter
    def error_action(self, value: str):
        self._global.error_action = value
        self._apply_error_settings()

    @property
    def error_print(self) -> str:
        return self.current.error_print

    @error_print.setter
    def error_print(self, value: str):
        self._global.error_print = value
        self._apply_error_settings()

    def _apply_error_settings(self):
        """Push the error settings to the library if it is already loaded."""
        from ._kernel import lib_loader
        from ._kernel.types import init_error_handling

        lib = lib_loader.loaded_lib()
        if lib is not None:
            init_error_handling(lib, self._global.error_action, self._global.error_print)

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Field overrides (max_len_out, library_path, ...)

        Returns:
            Context manager

        Raises:
            TypeError: If a keyword is not a configuration field, or names a
                process-wide field (error_action, error_print).
        """
        names = {f.name for f in fields(SpiceConfig)}
        unknown = set(kwargs) - names
        if unknown:
            raise TypeError(f"Unknown configuration field(s): {', '.join(sorted(unknown))}")
        process_wide = set(kwargs) & set(PROCESS_WIDE_FIELDS)
        if process_wide:
            raise TypeError(
                f"Process-wide field(s) cannot be overridden locally: {', '.join(sorted(process_wide))}"
            )
        return _LocalConfigContext(self, kwargs)

    # -------------------------------------------------------------------------
    # Reset / Serialization
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset the global configuration to defaults."""
        self._global = _default_config()
        self._apply_error_settings()

    def to_dict(self) -> Dict[str, Any]:
        """Export the effective configuration as dictionary."""
        cfg = self.current
        return {f.name: getattr(cfg, f.name) for f in fields(SpiceConfig)}

    def __repr__(self) -> str:
        return f"SpiceConfigManager({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, manager: SpiceConfigManager, overrides: Dict[str, Any]):
        self._manager = manager
        self._overrides = overrides
        self._previous: Optional[SpiceConfig] = None

    def __enter__(self):
        local = self._manager._local
        self._previous = getattr(local, "config", None)
        local.config = replace(self._manager.current, **self._overrides)
        return self._manager

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._manager._local.config = self._previous
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = SpiceConfigManager()


def get_config() -> SpiceConfigManager:
    """Get the global configuration instance."""
    return config


__all__ = [
    "DEFAULT_MAX_LEN_OUT",
    "MAX_LEN_OUT",
    "SpiceConfig",
    "SpiceConfigManager",
    "config",
    "get_config",
]
