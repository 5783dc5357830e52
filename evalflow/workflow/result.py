# evalflow/workflow/result.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Union

import pandas as pd

from evalflow.pipeline.parallel.collection import PartitionedCollection


class Checkpoint(str, Enum):
    AFTER_READ = "after_read"
    AFTER_PREPARE = "after_prepare"


@dataclass(frozen=True)
class Completed:
    """
    Train workflow ran to the end.

    models[i] was produced by algorithms[i].
    """
    models: List[Any]

    @property
    def completed(self) -> bool:
        return True


@dataclass(frozen=True)
class StoppedEarly:
    """
    Train workflow halted at a configured checkpoint; not an error.
    """
    checkpoint: Checkpoint

    @property
    def completed(self) -> bool:
        return False


TrainResult = Union[Completed, StoppedEarly]


@dataclass(frozen=True)
class FoldResult:
    """
    FoldResult（FINAL / FROZEN）

    - index: fold index (EX)
    - info: eval metadata as returned by the data source
    - results: collection of (query, prediction, actual)
    - dropped: queries removed under integrity_policy=drop
    """
    index: int
    info: Any
    results: PartitionedCollection
    dropped: int = 0

    def collect(self) -> List[tuple]:
        return self.results.collect()

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            self.results.collect(),
            columns=["query", "prediction", "actual"],
        )
