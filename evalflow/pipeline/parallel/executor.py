# evalflow/pipeline/parallel/executor.py
from __future__ import annotations

import os
from concurrent.futures import (
    Executor,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from typing import Any, Callable, Iterable

from evalflow.pipeline.parallel.types import ParallelBackend, ParallelKind
from evalflow.utils.logger import logs


class ParallelExecutor:
    """
    ParallelExecutor

    Contract:
    - one worker      -> sequential, results in submission order
    - several workers -> pool, results in COMPLETION order
    - first handler failure propagates (fail fast)

    Callers never rely on result order: handlers return results tagged
    with their own key and the caller reassembles by key.
    """

    @staticmethod
    def run(
            *,
            kind: ParallelKind,
            items: Iterable[Any],
            handler: Callable[[Any], Any],
            max_workers: int | None = None,
            backend: ParallelBackend = ParallelBackend.THREAD,
    ) -> list[Any]:
        items = list(items)
        if not items:
            logs.debug(f"[ParallelExecutor] kind={kind.value} no items to process")
            return []

        workers = ParallelExecutor._resolve_workers(items, max_workers)

        if workers == 1:
            return ParallelExecutor._run_sequential(items, handler)

        logs.debug(
            f"[ParallelExecutor] start kind={kind.value} "
            f"total={len(items)} workers={workers} backend={backend.value}"
        )
        return ParallelExecutor._run_parallel(items, handler, workers, backend)

    # ---------------- internal ----------------

    @staticmethod
    def _resolve_workers(items: list, max_workers: int | None) -> int:
        cpu = os.cpu_count() or 1
        if max_workers is None:
            return min(cpu, len(items))
        return max(1, min(max_workers, len(items)))

    @staticmethod
    def _run_sequential(
            items: list,
            handler: Callable[[Any], Any],
    ) -> list[Any]:
        return [handler(item) for item in items]

    @staticmethod
    def _run_parallel(
            items: list,
            handler: Callable[[Any], Any],
            workers: int,
            backend: ParallelBackend,
    ) -> list[Any]:
        with ParallelExecutor._pool(backend, workers) as pool:
            futures = [pool.submit(handler, item) for item in items]
            results = []
            try:
                for fut in as_completed(futures):
                    results.append(fut.result())  # 只取一次
            except BaseException:
                for fut in futures:
                    fut.cancel()
                raise

        return results

    @staticmethod
    def _pool(backend: ParallelBackend, workers: int) -> Executor:
        if backend == ParallelBackend.PROCESS:
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers)
