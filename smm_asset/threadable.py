"""
Convenience method to allow easy multi-threading of functions.
"""

from typing import TypeVar, Callable

import threading

F = TypeVar("F", bound=Callable[..., object])


def threadable(func: F) -> F:
    """Allows the function to be ran as a thread using the 'threaded' argument"""

    def new(*args, threaded=False, **kwargs):
        if threaded:
            thread = threading.Thread(target=func, args=args, kwargs=kwargs, daemon=True)
            thread.start()
            return thread
        else:
            return func(*args, **kwargs)

    new.__doc__ = func.__doc__
    new.__name__ = func.__name__
    new.__wrapped__ = func
    new._threadable = True

    return new
