# evalflow/workflow/steps/algorithm_train_step.py
from __future__ import annotations

from evalflow.engine.base import BoundModel
from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import TrainContext


class AlgorithmTrainStep(PipelineStep):
    """
    Contract:
    - consumes ctx.prepared_data
    - produces ctx.models, models[i] trained by algorithms[i]
    """

    stage = "train"

    def run(self, ctx: TrainContext) -> TrainContext:
        models = []
        for ax, algo in enumerate(ctx.algorithms):
            with self.inst.timer("train", algo=ax):
                model = self.call(algo, algo.train, ctx.runtime, ctx.prepared_data)
            models.append(self.call(algo, BoundModel.bind, ax, algo, model).model)
            ctx.log.info(f"[AlgorithmTrainStep] algorithm {ax} {algo!r} trained")

        ctx.models = models
        return ctx
