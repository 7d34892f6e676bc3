"""
Lazy Initialization Helper for Kernel Modules

Provides the decorator that applies ctypes signatures on first use, once per
loaded library handle.
"""

from functools import wraps

from .lib_loader import get_lib


def lazy_init_decorator(init_func_name='_init_signatures'):
    """
    Decorator factory for lazy initialization.

    Usage:
        def _init_signatures(lib):
            lib.ktotal_c.argtypes = [ctypes.c_char_p, ctypes.POINTER(SpiceInt)]

        @lazy_kernel
        def ktotal(kind):
            # _init_signatures(lib) has run for the current handle
            ...

    The initialization function receives the library handle. It runs again
    whenever the loader hands out a different handle (e.g. after
    ``lib_loader.clear_cache()``).

    Args:
        init_func_name: Name of the initialization function in the module

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            module = func.__globals__
            state_var = f'_{init_func_name.lstrip("_")}_lib'

            lib = get_lib()
            if module.get(state_var) is not lib:
                init_func = module.get(init_func_name)
                if init_func:
                    try:
                        init_func(lib)
                    except Exception as e:
                        raise RuntimeError(
                            f"Failed to initialize {func.__module__}: {e}"
                        ) from e
                module[state_var] = lib

            return func(*args, **kwargs)

        return wrapper
    return decorator


# Convenient alias
lazy_kernel = lazy_init_decorator('_init_signatures')
