import time
import functools
import threading
from typing import Callable, TypeVar
from typing_extensions import ParamSpec
import numba  # type: ignore
from inksplit.kernel.system.logging import get_logger
from inksplit.kernel.system.config import APP_CONFIG

logger = get_logger("perf")

P = ParamSpec("P")
R = TypeVar("R")

# numba's workqueue layer aborts on concurrent parallel launches
_PARALLEL_LOCK = threading.Lock()


def _find_shape(args: tuple, kwargs: dict) -> object:
    for arg in args:
        if hasattr(arg, "shape"):
            return getattr(arg, "shape")
    for val in kwargs.values():
        if hasattr(val, "shape"):
            return getattr(val, "shape")
    return "N/A"


def time_function(func: Callable[P, R]) -> Callable[P, R]:
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        result = func(*args, **kwargs)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.debug(
            f"PERF: {func.__name__} took {duration_ms:.3f}ms "
            f"(shape: {_find_shape(args, kwargs)})"
        )
        return result

    return wrapper


def parallel_kernel(func: Callable[P, R]) -> Callable[P, R]:
    """
    Serializes launches of numba parallel kernels and bounds their thread count
    to the configured worker pool size.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with _PARALLEL_LOCK:
            numba.set_num_threads(
                max(1, min(APP_CONFIG.max_workers, numba.config.NUMBA_NUM_THREADS))
            )
            return func(*args, **kwargs)

    return wrapper
