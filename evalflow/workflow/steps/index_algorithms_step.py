# evalflow/workflow/steps/index_algorithms_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import EvalContext


class IndexAlgorithmsStep(PipelineStep):
    """AX = position in the algorithm list."""

    stage = "index"

    def run(self, ctx: EvalContext) -> EvalContext:
        ctx.algo_map = dict(enumerate(ctx.algorithms))
        self.inst.metrics.record("algo_count", ctx.algo_count)
        return ctx
