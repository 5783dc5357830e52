#!filepath: evalflow/pipeline/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from evalflow.config.workflow_config import ExecutionConfig
from evalflow.pipeline.parallel.collection import PartitionedCollection
from evalflow.utils.logger import Logging, logs


@dataclass
class RuntimeContext:
    """
    RuntimeContext = the execution handle every stage call receives

    - stages build collections through it, never through globals
    - log is the handle of the current workflow invocation
    """

    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    log: Logging = field(default_factory=lambda: logs)

    def parallelize(
            self,
            items: Iterable,
            num_partitions: Optional[int] = None,
    ) -> PartitionedCollection:
        return PartitionedCollection.parallelize(
            items,
            num_partitions=num_partitions,
            execution=self.execution,
        )

    def empty(self) -> PartitionedCollection:
        return PartitionedCollection.empty(self.execution)

    def union(self, collections: Sequence[PartitionedCollection]) -> PartitionedCollection:
        if not collections:
            return self.empty()
        return PartitionedCollection.union(collections)

    def as_collection(self, data) -> PartitionedCollection:
        if isinstance(data, PartitionedCollection):
            return data
        return self.parallelize(data)
