"""
Order-preserving parallel map.
"""

import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from tqdm import tqdm

from ..errors import ConfigurationError

BACKENDS = ('thread', 'process')


def resolve_n_jobs(n_jobs: Optional[int]) -> int:
    """Number of workers; None or 1 is sequential, -1 uses all CPUs."""
    if n_jobs is None:
        return 1
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise ConfigurationError(f"n_jobs must be >= 1 or -1, got {n_jobs}")
    return int(n_jobs)


def check_backend(backend: str) -> str:
    if backend not in BACKENDS:
        raise ConfigurationError(f"Unsupported backend: {backend}. Use one of {BACKENDS}.")
    return backend


def parallel_map(fun: Callable, inputs: Sequence, more_args: Optional[dict] = None,
                 n_jobs: Optional[int] = 1, backend: str = 'thread',
                 desc: Optional[str] = None, verbose: bool = False) -> List:
    """
    Apply `fun(item, **more_args)` to every item of `inputs`.

    Results are returned in input order whatever the execution order. The
    call returns only once every item has finished; if any item raised, the
    first failing item's exception (in input order) is re-raised.

    Args:
        fun: Function to apply, must be picklable for the process backend
        inputs: Items to map over
        more_args: Keyword arguments shared by all calls
        n_jobs: Number of workers
        backend: 'thread' or 'process'
        desc: Progress bar description
        verbose: Whether to show a progress bar
    """
    backend = check_backend(backend)
    more_args = more_args or {}
    n_jobs = resolve_n_jobs(n_jobs)
    inputs = list(inputs)

    if n_jobs == 1 or len(inputs) <= 1:
        iterator = tqdm(inputs, desc=desc) if verbose else inputs
        return [fun(item, **more_args) for item in iterator]

    executor_cls = ThreadPoolExecutor if backend == 'thread' else ProcessPoolExecutor
    with executor_cls(max_workers=min(n_jobs, len(inputs))) as executor:
        futures = [executor.submit(fun, item, **more_args) for item in inputs]
        pbar = tqdm(total=len(futures), desc=desc) if verbose else None
        try:
            for future in futures:
                future.exception()
                if pbar is not None:
                    pbar.update(1)
        finally:
            if pbar is not None:
                pbar.close()

    return [future.result() for future in futures]
