# evalflow/workflow/steps/fold_serve_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import EvalContext
from evalflow.workflow.reconcile import serve_fold
from evalflow.workflow.result import FoldResult


class FoldServeStep(PipelineStep):
    """
    Contract:
    - joins ctx.vectors[ex] with the fold's (qid, (query, actual))
    - serves every query with its full prediction vector
    - produces ctx.results in ascending fold index
    """

    stage = "serve"

    def run(self, ctx: EvalContext) -> EvalContext:
        serving = ctx.serving
        results = []
        self.inst.progress.start("serve", ctx.eval_count)

        for ex in sorted(ctx.folds):
            fold = ctx.folds[ex]
            with self.inst.timer("serve", fold=ex):
                served = self.call(
                    f"fold {ex} / {serving!r}",
                    serve_fold,
                    ctx.runtime,
                    fold.qas,
                    ctx.vectors[ex],
                    serving,
                    ctx.cfg.integrity_policy,
                )

            dropped = served.dropped
            if dropped:
                self.inst.metrics.record("dropped", dropped, fold=ex)

            results.append(
                FoldResult(
                    index=ex,
                    info=fold.info,
                    results=served.vectors,
                    dropped=dropped,
                )
            )
            self.inst.progress.advance("serve")

        ctx.results = results
        return ctx
