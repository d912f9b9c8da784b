"""
Crypto worker pool - run KDF-bound vault operations off the caller's thread.

Argon2id is deliberately slow. A request-handling thread submits the
unlock/confirm/import call here and waits on the future (or not).
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 2


class CryptoWorkerPool:
    """
    Thin wrapper over ThreadPoolExecutor with a fixed thread name prefix.

    Usage:
        pool = CryptoWorkerPool(2)
        future = pool.submit(auth.unlock_by_address, address, password)
        result = future.result()
        pool.shutdown()
    """

    def __init__(self, max_workers: int = DEFAULT_WORKERS):
        self.max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="seedvault-crypto",
        )
        self._closed = False

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """Schedule fn(*args, **kwargs). Raises RuntimeError after shutdown."""
        if self._closed:
            raise RuntimeError("Worker pool is shut down")
        return self._executor.submit(fn, *args, **kwargs)

    def run(self, fn: Callable, *args, timeout: float = None, **kwargs):
        """Submit and wait for the result. Exceptions from fn propagate."""
        return self.submit(fn, *args, **kwargs).result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait)
        logger.debug("Crypto worker pool shut down")

    def __enter__(self) -> "CryptoWorkerPool":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
