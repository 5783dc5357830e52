# evalflow/workflow/steps/read_training_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.utils.errors import StorageError
from evalflow.workflow.context import TrainContext


class ReadTrainingStep(PipelineStep):
    """
    Contract:
    - calls data_source.read_training
    - produces ctx.training_data
    - StorageError is logged with its reason and re-raised (fatal)
    """

    stage = "read"

    def run(self, ctx: TrainContext) -> TrainContext:
        ds = ctx.data_source

        try:
            with self.inst.timer("read"):
                ctx.training_data = self.call(ds, ds.read_training, ctx.runtime)
        except StorageError as e:
            ctx.log.error(
                f"[ReadTrainingStep] Error occurred reading from data source. "
                f"(Reason: {e.message}) Please see the log for debugging details."
            )
            raise

        return ctx
