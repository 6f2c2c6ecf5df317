import functools
import inspect
import logging
import time

from core.metrics import CALL_DURATION

logger = logging.getLogger(__name__)


class Profiler:
    """
    Provides a decorator to profile synchronous and asynchronous methods,
    logging their execution times and recording them in a histogram.
    """

    @staticmethod
    def _report(func, start):
        elapsed = time.perf_counter() - start
        CALL_DURATION.labels(function=func.__qualname__).observe(elapsed)
        logger.debug(f"[Profiler] {func.__qualname__} took {elapsed:.4f}s")

    @staticmethod
    def profile(func):
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    Profiler._report(func, start)

            return async_wrapper
        else:

            @functools.wraps(func)
            def sync_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return func(*args, **kwargs)
                finally:
                    Profiler._report(func, start)

            return sync_wrapper
