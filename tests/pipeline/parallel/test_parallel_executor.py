# tests/pipeline/parallel/test_parallel_executor.py
import threading
import time

import pytest

from evalflow.pipeline.parallel.executor import ParallelExecutor
from evalflow.pipeline.parallel.types import ParallelBackend, ParallelKind


def worker_maybe_fail(item: str) -> str:
    if item == "bad":
        raise RuntimeError("boom")
    return item.upper()


def test_no_items_returns_empty_list():
    assert ParallelExecutor.run(
        kind=ParallelKind.PARTITION,
        items=[],
        handler=worker_maybe_fail,
    ) == []


def test_single_worker_is_sequential_in_order():
    seen = []

    def handler(item):
        seen.append((item, threading.current_thread().name))
        return item * 2

    out = ParallelExecutor.run(
        kind=ParallelKind.TRAIN,
        items=[3, 1, 2],
        handler=handler,
        max_workers=1,
    )

    assert out == [6, 2, 4]
    assert [i for i, _ in seen] == [3, 1, 2]
    assert {name for _, name in seen} == {threading.current_thread().name}


def test_thread_backend_returns_every_result():
    def slow_first(item):
        if item == 0:
            time.sleep(0.05)
        return item

    out = ParallelExecutor.run(
        kind=ParallelKind.PARTITION,
        items=range(6),
        handler=slow_first,
        max_workers=3,
    )

    # completion order: the slow item cannot come first
    assert sorted(out) == list(range(6))
    assert out[0] != 0


def test_process_backend():
    out = ParallelExecutor.run(
        kind=ParallelKind.PARTITION,
        items=[-1, -2, 3],
        handler=abs,
        max_workers=2,
        backend=ParallelBackend.PROCESS,
    )

    assert sorted(out) == [1, 2, 3]


@pytest.mark.parametrize("max_workers", [1, 3])
def test_failure_propagates(max_workers):
    with pytest.raises(RuntimeError, match="boom"):
        ParallelExecutor.run(
            kind=ParallelKind.TRAIN,
            items=["ok", "bad", "never"],
            handler=worker_maybe_fail,
            max_workers=max_workers,
        )


@pytest.mark.parametrize(
    "items, max_workers, expected",
    [
        (list(range(10)), 4, 4),
        (list(range(2)), 8, 2),
        (list(range(5)), 0, 1),
    ],
)
def test_resolve_workers(items, max_workers, expected):
    assert ParallelExecutor._resolve_workers(items, max_workers) == expected


def test_resolve_workers_defaults_to_cpu(monkeypatch):
    monkeypatch.setattr("os.cpu_count", lambda: 2)
    assert ParallelExecutor._resolve_workers(list(range(10)), None) == 2
