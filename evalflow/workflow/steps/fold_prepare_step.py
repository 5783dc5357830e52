# evalflow/workflow/steps/fold_prepare_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import EvalContext


class FoldPrepareStep(PipelineStep):
    """One prepare call per fold; folds share nothing."""

    stage = "prepare"

    def run(self, ctx: EvalContext) -> EvalContext:
        prep = ctx.preparator
        self.inst.progress.start("prepare", ctx.eval_count)
        for ex, fold in ctx.folds.items():
            with self.inst.timer("prepare", fold=ex):
                ctx.prepared[ex] = self.call(
                    f"fold {ex} / {prep!r}",
                    prep.prepare,
                    ctx.runtime,
                    fold.training_data,
                )
            self.inst.progress.advance("prepare")
        return ctx
