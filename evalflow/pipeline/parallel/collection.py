# evalflow/pipeline/parallel/collection.py
from __future__ import annotations

import numbers
import zlib
from functools import partial
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from evalflow.config.workflow_config import ExecutionConfig
from evalflow.pipeline.parallel.executor import ParallelExecutor
from evalflow.pipeline.parallel.types import ParallelKind

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")
V = TypeVar("V")
W = TypeVar("W")

Partition = List[Any]


# --------------------------------------------------
# partition-level workers
# module level so the process backend can pickle them
# --------------------------------------------------
def _apply(fn, item):
    idx, part = item
    return idx, fn(idx, part)


def _map_part(fn, idx, part):
    return [fn(x) for x in part]


def _map_values_part(fn, idx, part):
    return [(k, fn(v)) for k, v in part]


def _flat_map_part(fn, idx, part):
    return [y for x in part for y in fn(x)]


def _filter_part(fn, idx, part):
    return [x for x in part if fn(x)]


def _map_partitions_part(fn, idx, part):
    return list(fn(iter(part)))


def _zip_unique_id_part(n, idx, part):
    return [(x, i * n + idx) for i, x in enumerate(part)]


def _bucket_part(m, idx, part):
    buckets: List[Partition] = [[] for _ in range(m)]
    for kv in part:
        buckets[partition_for(kv[0], m)].append(kv)
    return buckets


def _group_part(idx, part):
    groups: dict = {}
    for k, v in part:
        groups.setdefault(k, []).append(v)
    return list(groups.items())


def _join_part(outer, idx, sides):
    left, right = sides
    index: dict = {}
    for k, w in right:
        index.setdefault(k, []).append(w)

    out = []
    for k, v in left:
        matches = index.get(k)
        if matches:
            out.extend((k, (v, w)) for w in matches)
        elif outer:
            out.append((k, (v, None)))
    return out


def canonical_key(key: Any) -> Any:
    """
    Map keys that compare equal to one representation: numpy integers ->
    int, numpy strings -> str, recursively inside tuples.
    """
    if isinstance(key, numbers.Integral):
        return int(key)
    if isinstance(key, str):
        return str(key)
    if isinstance(key, tuple):
        return tuple(canonical_key(k) for k in key)
    return key


def partition_for(key: Any, m: int) -> int:
    """
    Stable key -> partition mapping; equal keys share a partition.

    Python's str hash is salted per process, so non-int keys go through
    crc32 of their canonical repr to land identically in every worker.
    """
    key = canonical_key(key)
    if isinstance(key, int):
        return key % m
    return zlib.crc32(repr(key).encode("utf-8")) % m


class PartitionedCollection(Generic[T]):
    """
    PartitionedCollection

    Semantics:
    - eager and immutable: every operation returns a new collection
    - element order is NOT part of the contract
    - per-partition work is dispatched through ParallelExecutor; results
      come back tagged with their partition index and are put back in place
    """

    def __init__(
            self,
            partitions: Sequence[Partition],
            execution: Optional[ExecutionConfig] = None,
    ):
        self._partitions: List[Partition] = [list(p) for p in partitions]
        self.execution = execution if execution is not None else ExecutionConfig()

    # --------------------------------------------------
    # construction
    # --------------------------------------------------
    @classmethod
    def parallelize(
            cls,
            items: Iterable[T],
            num_partitions: Optional[int] = None,
            execution: Optional[ExecutionConfig] = None,
    ) -> "PartitionedCollection[T]":
        execution = execution if execution is not None else ExecutionConfig()
        n = num_partitions if num_partitions is not None else execution.num_partitions
        if n < 1:
            raise ValueError(f"num_partitions must be >= 1, got {n}")

        items = list(items)
        size = len(items)
        partitions = [items[i * size // n:(i + 1) * size // n] for i in range(n)]
        return cls(partitions, execution)

    @classmethod
    def empty(cls, execution: Optional[ExecutionConfig] = None) -> "PartitionedCollection":
        return cls([[]], execution)

    @classmethod
    def union(cls, collections: Sequence["PartitionedCollection"]) -> "PartitionedCollection":
        if not collections:
            return cls.empty()
        partitions = [p for c in collections for p in c._partitions]
        return cls(partitions, collections[0].execution)

    # --------------------------------------------------
    # inspection
    # --------------------------------------------------
    @property
    def num_partitions(self) -> int:
        return len(self._partitions)

    def partitions(self) -> List[Partition]:
        return [list(p) for p in self._partitions]

    def count(self) -> int:
        return sum(len(p) for p in self._partitions)

    def collect(self) -> List[T]:
        return [x for p in self._partitions for x in p]

    def __repr__(self) -> str:
        return (
            f"PartitionedCollection(partitions={self.num_partitions}, "
            f"count={self.count()})"
        )

    # --------------------------------------------------
    # narrow transformations
    # --------------------------------------------------
    def map(self, fn: Callable[[T], U]) -> "PartitionedCollection[U]":
        return self._narrow(partial(_map_part, fn))

    def map_values(self, fn: Callable[[V], W]) -> "PartitionedCollection":
        return self._narrow(partial(_map_values_part, fn))

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "PartitionedCollection[U]":
        return self._narrow(partial(_flat_map_part, fn))

    def filter(self, fn: Callable[[T], bool]) -> "PartitionedCollection[T]":
        return self._narrow(partial(_filter_part, fn))

    def map_partitions(self, fn: Callable[[Iterable[T]], Iterable[U]]) -> "PartitionedCollection[U]":
        return self._narrow(partial(_map_partitions_part, fn))

    def keys(self) -> "PartitionedCollection":
        return self.map(_first)

    def values(self) -> "PartitionedCollection":
        return self.map(_second)

    def zip_with_unique_id(self) -> "PartitionedCollection[Tuple[T, int]]":
        """
        Pair each element with an id unique in this collection.

        Element i of partition k (out of n) gets i * n + k; ids are not
        dense but need no coordination between partitions.
        """
        return self._narrow(partial(_zip_unique_id_part, self.num_partitions))

    # --------------------------------------------------
    # wide transformations (shuffle by key)
    # --------------------------------------------------
    def group_by_key(self, num_partitions: Optional[int] = None) -> "PartitionedCollection":
        m = num_partitions or self.num_partitions
        shuffled = self._shuffle(m)
        return self._run(_group_part, list(enumerate(shuffled)))

    def join(
            self,
            other: "PartitionedCollection",
            num_partitions: Optional[int] = None,
    ) -> "PartitionedCollection":
        return self._join(other, num_partitions, outer=False)

    def left_outer_join(
            self,
            other: "PartitionedCollection",
            num_partitions: Optional[int] = None,
    ) -> "PartitionedCollection":
        return self._join(other, num_partitions, outer=True)

    # --------------------------------------------------
    # internal
    # --------------------------------------------------
    def _join(self, other, num_partitions, *, outer: bool):
        m = num_partitions or max(self.num_partitions, other.num_partitions)
        left = self._shuffle(m)
        right = other._shuffle(m)
        return self._run(partial(_join_part, outer), list(enumerate(zip(left, right))))

    def _shuffle(self, m: int) -> List[Partition]:
        bucketed = self._run_raw(partial(_bucket_part, m), list(enumerate(self._partitions)))
        targets: List[Partition] = [[] for _ in range(m)]
        for buckets in bucketed:
            for j, bucket in enumerate(buckets):
                targets[j].extend(bucket)
        return targets

    def _narrow(self, fn) -> "PartitionedCollection":
        return self._run(fn, list(enumerate(self._partitions)))

    def _run(self, fn, items) -> "PartitionedCollection":
        return PartitionedCollection(self._run_raw(fn, items), self.execution)

    def _run_raw(self, fn, items) -> List[Any]:
        tagged = ParallelExecutor.run(
            kind=ParallelKind.PARTITION,
            items=items,
            handler=partial(_apply, fn),
            max_workers=self.execution.max_workers,
            backend=self.execution.backend,
        )
        # completion order -> partition order
        out: List[Any] = [None] * len(items)
        for idx, result in tagged:
            out[idx] = result
        return out


def _first(kv):
    return kv[0]


def _second(kv):
    return kv[1]
