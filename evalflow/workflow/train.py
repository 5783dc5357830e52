# evalflow/workflow/train.py
from __future__ import annotations

from typing import List, Optional, Sequence

from evalflow.config.workflow_config import WorkflowConfig
from evalflow.engine.base import Algorithm, DataSource, Preparator
from evalflow.observability.instrumentation import Instrumentation, NoOpInstrumentation
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.step import PipelineStep
from evalflow.utils.logger import logs
from evalflow.workflow.context import TrainContext, new_run_id
from evalflow.workflow.result import Checkpoint, Completed, StoppedEarly, TrainResult
from evalflow.workflow.steps.algorithm_train_step import AlgorithmTrainStep
from evalflow.workflow.steps.checkpoint_step import CheckpointStep
from evalflow.workflow.steps.prepare_step import PrepareStep
from evalflow.workflow.steps.read_training_step import ReadTrainingStep
from evalflow.workflow.steps.sanity_check_step import ModelSanityCheckStep, SanityCheckStep


class TrainWorkflow:
    """
    TrainWorkflow（FINAL）

    read -> [stop_after_read] -> sanity -> prepare -> [stop_after_prepare]
         -> sanity -> train all algorithms -> sanity per model

    Semantics:
    - one run() == one invocation with its own log handle and context
    - checkpoints end the run with StoppedEarly, never with an exception
    - any stage failure raises; nothing partial is returned
    """

    def __init__(
            self,
            data_source: DataSource,
            preparator: Preparator,
            algorithms: Sequence[Algorithm],
            cfg: Optional[WorkflowConfig] = None,
            inst: Optional[Instrumentation] = None,
    ):
        self.data_source = data_source
        self.preparator = preparator
        self.algorithms = list(algorithms)
        self.cfg = cfg if cfg is not None else WorkflowConfig()

        if inst is None:
            inst = Instrumentation() if self.cfg.instrumentation else NoOpInstrumentation()
        self.inst = inst

        self.steps: List[PipelineStep] = [
            ReadTrainingStep(inst),
            CheckpointStep(Checkpoint.AFTER_READ, inst),
            SanityCheckStep("training_data", inst),
            PrepareStep(inst),
            CheckpointStep(Checkpoint.AFTER_PREPARE, inst),
            SanityCheckStep("prepared_data", inst),
            AlgorithmTrainStep(inst),
            ModelSanityCheckStep(inst),
        ]

    def run(self, run_id: Optional[str] = None) -> TrainResult:
        run_id = run_id or new_run_id()
        log = logs.bind(workflow="train", run_id=run_id)

        ctx = TrainContext(
            run_id=run_id,
            cfg=self.cfg,
            runtime=RuntimeContext(execution=self.cfg.execution, log=log),
            data_source=self.data_source,
            preparator=self.preparator,
            algorithms=self.algorithms,
        )

        log.info(f"[TrainWorkflow] START run_id={run_id}")
        log.info(f"[TrainWorkflow] DataSource: {self.data_source!r}")
        log.info(f"[TrainWorkflow] Preparator: {self.preparator!r}")
        log.info(f"[TrainWorkflow] AlgorithmList: {self.algorithms!r}")
        if self.cfg.skip_sanity_check:
            log.info("[TrainWorkflow] Data sanity check is off.")
        else:
            log.info("[TrainWorkflow] Data sanity check is on.")

        for step in self.steps:
            with step.timed():
                ctx = step.run(ctx)

            if ctx.abort_pipeline:
                self.inst.generate_timeline_report(run_id)
                log.info(f"[TrainWorkflow] STOPPED at {ctx.abort_reason.value}")
                return StoppedEarly(ctx.abort_reason)

        self.inst.generate_timeline_report(run_id)
        log.info(f"[TrainWorkflow] DONE models={len(ctx.models)}")
        return Completed(models=list(ctx.models))
