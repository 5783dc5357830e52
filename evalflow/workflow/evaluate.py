# evalflow/workflow/evaluate.py
from __future__ import annotations

from typing import List, Optional, Sequence

from evalflow.config.workflow_config import WorkflowConfig
from evalflow.engine.base import Algorithm, DataSource, Preparator, Serving
from evalflow.observability.instrumentation import Instrumentation, NoOpInstrumentation
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.step import PipelineStep
from evalflow.utils.logger import logs
from evalflow.workflow.context import EvalContext, new_run_id
from evalflow.workflow.result import FoldResult
from evalflow.workflow.steps.fold_predict_step import FoldPredictStep
from evalflow.workflow.steps.fold_prepare_step import FoldPrepareStep
from evalflow.workflow.steps.fold_serve_step import FoldServeStep
from evalflow.workflow.steps.fold_train_step import FoldTrainStep
from evalflow.workflow.steps.index_algorithms_step import IndexAlgorithmsStep
from evalflow.workflow.steps.read_folds_step import ReadFoldsStep


class EvaluateWorkflow:
    """
    EvaluateWorkflow（FINAL）

    index algorithms -> read folds + qids -> prepare per fold
      -> train per (fold, algorithm) -> predict + reconcile per fold
      -> join + serve per fold

    Semantics:
    - output: one FoldResult per fold, ascending fold index
    - prediction vectors ordered by algorithm index, joined by qid
    - no sanity checks, no checkpoints
    - any stage failure aborts the whole run
    """

    def __init__(
            self,
            data_source: DataSource,
            preparator: Preparator,
            algorithms: Sequence[Algorithm],
            serving: Serving,
            cfg: Optional[WorkflowConfig] = None,
            inst: Optional[Instrumentation] = None,
    ):
        if not algorithms:
            raise ValueError("EvaluateWorkflow needs at least one algorithm")

        self.data_source = data_source
        self.preparator = preparator
        self.algorithms = list(algorithms)
        self.serving = serving
        self.cfg = cfg if cfg is not None else WorkflowConfig()

        if inst is None:
            inst = Instrumentation() if self.cfg.instrumentation else NoOpInstrumentation()
        self.inst = inst

        self.steps: List[PipelineStep] = [
            IndexAlgorithmsStep(inst),
            ReadFoldsStep(inst),
            FoldPrepareStep(inst),
            FoldTrainStep(inst),
            FoldPredictStep(inst),
            FoldServeStep(inst),
        ]

    def run(self, run_id: Optional[str] = None) -> List[FoldResult]:
        run_id = run_id or new_run_id()
        log = logs.bind(workflow="evaluate", run_id=run_id)

        ctx = EvalContext(
            run_id=run_id,
            cfg=self.cfg,
            runtime=RuntimeContext(execution=self.cfg.execution, log=log),
            data_source=self.data_source,
            preparator=self.preparator,
            algorithms=self.algorithms,
            serving=self.serving,
        )

        log.info(f"[EvaluateWorkflow] START run_id={run_id}")
        log.info(f"[EvaluateWorkflow] DataSource: {self.data_source!r}")
        log.info(f"[EvaluateWorkflow] Preparator: {self.preparator!r}")
        log.info(f"[EvaluateWorkflow] AlgorithmList: {self.algorithms!r}")
        log.info(f"[EvaluateWorkflow] Serving: {self.serving!r}")

        for step in self.steps:
            with step.timed():
                ctx = step.run(ctx)

        self.inst.generate_timeline_report(run_id)
        log.info(
            f"[EvaluateWorkflow] DONE folds={ctx.eval_count} "
            f"algorithms={ctx.algo_count}"
        )
        return ctx.results
