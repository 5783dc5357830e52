# evalflow/workflow/steps/prepare_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import TrainContext


class PrepareStep(PipelineStep):
    """
    Contract:
    - consumes ctx.training_data
    - produces ctx.prepared_data
    """

    stage = "prepare"

    def run(self, ctx: TrainContext) -> TrainContext:
        prep = ctx.preparator
        with self.inst.timer("prepare"):
            ctx.prepared_data = self.call(
                prep, prep.prepare, ctx.runtime, ctx.training_data
            )
        return ctx
