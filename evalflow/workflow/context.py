# evalflow/workflow/context.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from evalflow.config.workflow_config import WorkflowConfig
from evalflow.engine.base import Algorithm, BoundModel, DataSource, Preparator, Serving
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.parallel.collection import PartitionedCollection
from evalflow.utils.logger import Logging
from evalflow.workflow.result import Checkpoint, FoldResult


def new_run_id() -> str:
    return f"{datetime.now():%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:6]}"


@dataclass
class Fold:
    """
    One evaluation split.

    qas: collection of (qid, (query, actual)); qid unique within the fold.
    """
    index: int
    training_data: Any
    info: Any
    qas: PartitionedCollection


@dataclass
class TrainContext:
    """
    TrainContext

    Semantics:
    - one context == one train run
    - steps fill the stage slots in order
    - abort_* are runtime flags set by checkpoint steps
    """

    run_id: str
    cfg: WorkflowConfig
    runtime: RuntimeContext

    data_source: DataSource
    preparator: Preparator
    algorithms: List[Algorithm]

    training_data: Any = None
    prepared_data: Any = None
    models: List[Any] = field(default_factory=list)

    # -------- runtime flags --------
    abort_pipeline: bool = False
    abort_reason: Optional[Checkpoint] = None

    @property
    def log(self) -> Logging:
        return self.runtime.log


@dataclass
class EvalContext:
    """
    EvalContext

    Every map is keyed by fold index (EX) and, where nested, by
    algorithm index (AX).
    """

    run_id: str
    cfg: WorkflowConfig
    runtime: RuntimeContext

    data_source: DataSource
    preparator: Preparator
    algorithms: List[Algorithm]
    serving: Serving

    algo_map: Dict[int, Algorithm] = field(default_factory=dict)
    folds: Dict[int, Fold] = field(default_factory=dict)
    prepared: Dict[int, Any] = field(default_factory=dict)
    models: Dict[int, Dict[int, BoundModel]] = field(default_factory=dict)

    # (qid, prediction vector)
    vectors: Dict[int, PartitionedCollection] = field(default_factory=dict)
    dropped: Dict[int, int] = field(default_factory=dict)

    results: List[FoldResult] = field(default_factory=list)

    @property
    def log(self) -> Logging:
        return self.runtime.log

    @property
    def algo_count(self) -> int:
        return len(self.algo_map)

    @property
    def eval_count(self) -> int:
        return len(self.folds)
