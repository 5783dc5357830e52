# evalflow/workflow/steps/fold_train_step.py
from __future__ import annotations

from functools import partial
from time import perf_counter
from typing import Any, Dict, Tuple

from evalflow.engine.base import Algorithm, BoundModel
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.parallel.executor import ParallelExecutor
from evalflow.pipeline.parallel.types import ParallelKind
from evalflow.pipeline.step import PipelineStep, guard
from evalflow.workflow.context import EvalContext


def train_task(
        algo_map: Dict[int, Algorithm],
        prepared: Dict[int, Any],
        runtime: RuntimeContext,
        key: Tuple[int, int],
):
    """
    One (fold, algorithm) training unit.

    Runs in a worker under the process backend, so everything it receives
    and returns is pickled. Returns (key, bound model, seconds).
    """
    ex, ax = key
    algo = algo_map[ax]
    entity = f"fold {ex} / algorithm {ax} {algo!r}"

    start = perf_counter()
    model = guard("train", entity, algo.train, runtime, prepared[ex])
    bound = guard("train", entity, BoundModel.bind, ax, algo, model)
    return key, bound, perf_counter() - start


class FoldTrainStep(PipelineStep):
    """
    evalCount x algoCount independent training tasks.

    Results arrive in completion order and are stored by (ex, ax).
    Dispatch failures (e.g. an unpicklable stage) surface as StageError.
    """

    stage = "train"

    def run(self, ctx: EvalContext) -> EvalContext:
        keys = [(ex, ax) for ex in ctx.folds for ax in ctx.algo_map]
        execution = ctx.cfg.execution

        self.inst.progress.start("train", len(keys), "models")
        results = self.call(
            f"{len(keys)} fold x algorithm tasks ({execution.backend.value})",
            ParallelExecutor.run,
            kind=ParallelKind.TRAIN,
            items=keys,
            handler=partial(train_task, ctx.algo_map, ctx.prepared, ctx.runtime),
            max_workers=execution.max_workers,
            backend=execution.backend,
        )
        self.inst.progress.advance("train", len(results))

        ctx.models = {ex: {} for ex in ctx.folds}
        for (ex, ax), bound, seconds in results:
            ctx.models[ex][ax] = bound
            self.inst.add_span("train", seconds, fold=ex, algo=ax)
        return ctx
