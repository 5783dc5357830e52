# evalflow/workflow/steps/read_folds_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.utils.errors import IntegrityError
from evalflow.workflow.context import EvalContext, Fold
from evalflow.workflow.reconcile import assign_qids


class ReadFoldsStep(PipelineStep):
    """
    Contract:
    - calls data_source.read_eval
    - EX = enumeration order of the returned folds
    - every held-out (query, actual) gets a qid unique within its fold
    """

    stage = "read_eval"

    def run(self, ctx: EvalContext) -> EvalContext:
        ds = ctx.data_source

        with self.inst.timer("read_eval"):
            triples = self.call(ds, ds.read_eval, ctx.runtime)

            for ex, triple in enumerate(triples):
                try:
                    training_data, info, qa = triple
                except (TypeError, ValueError) as e:
                    raise IntegrityError(
                        f"fold {ex}: expected (training_data, info, held-out) "
                        f"triple, got {type(triple).__name__}",
                        stage=self.stage,
                        entity=repr(ds),
                    ) from e

                qas = assign_qids(ctx.runtime.as_collection(qa))
                ctx.folds[ex] = Fold(
                    index=ex,
                    training_data=training_data,
                    info=info,
                    qas=qas,
                )
                self.inst.metrics.record("queries", qas.count(), fold=ex)

        self.inst.metrics.record("eval_count", ctx.eval_count)
        ctx.log.info(f"[ReadFoldsStep] folds={ctx.eval_count}")
        return ctx
