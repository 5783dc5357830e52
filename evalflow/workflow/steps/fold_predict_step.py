# evalflow/workflow/steps/fold_predict_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import EvalContext
from evalflow.workflow.reconcile import reconcile_predictions, tag_predictions


class FoldPredictStep(PipelineStep):
    """
    Contract:
    - per fold, every algorithm predicts every held-out query
    - streams tagged (qid, (ax, p)), grouped by qid
    - produces ctx.vectors[ex]: (qid, [p ordered by ax])
    """

    stage = "predict"

    def run(self, ctx: EvalContext) -> EvalContext:
        runtime = ctx.runtime
        self.inst.progress.start("predict", ctx.eval_count)

        for ex, fold in ctx.folds.items():
            queries = fold.qas.map_values(_query)

            with self.inst.timer("predict", fold=ex):
                streams = []
                for ax in range(ctx.algo_count):
                    bound = ctx.models[ex][ax]
                    predictions = self.call(
                        f"fold {ex} / algorithm {ax} {bound.algorithm!r}",
                        bound.batch_predict,
                        runtime,
                        queries,
                    )
                    streams.append(tag_predictions(ax, runtime.as_collection(predictions)))

            with self.inst.timer("reconcile", fold=ex):
                reconciled = self.call(
                    f"fold {ex}",
                    reconcile_predictions,
                    runtime,
                    streams,
                    ctx.algo_count,
                    ctx.cfg.integrity_policy,
                    stage="reconcile",
                )

            ctx.vectors[ex] = reconciled.vectors
            ctx.dropped[ex] = reconciled.dropped
            if reconciled.dropped:
                self.inst.metrics.record("incomplete", reconciled.dropped, fold=ex)
            self.inst.progress.advance("predict")
        return ctx


def _query(qa):
    return qa[0]
