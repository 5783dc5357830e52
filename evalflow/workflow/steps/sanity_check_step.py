# evalflow/workflow/steps/sanity_check_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import TrainContext
from evalflow.workflow.sanity import probe


class SanityCheckStep(PipelineStep):
    """
    Probe one context slot (``training_data`` / ``prepared_data``).
    No-op when skip_sanity_check is set.
    """

    stage = "sanity_check"

    def __init__(self, slot: str, inst=None):
        super().__init__(inst)
        self.slot = slot

    def run(self, ctx: TrainContext) -> TrainContext:
        if ctx.cfg.skip_sanity_check:
            return ctx

        with self.inst.timer(f"sanity_check:{self.slot}"):
            self.call(
                self.slot,
                probe,
                getattr(ctx, self.slot),
                entity=self.slot,
                log=ctx.log,
            )
        return ctx


class ModelSanityCheckStep(PipelineStep):
    """Probe every trained model independently."""

    stage = "sanity_check"

    def run(self, ctx: TrainContext) -> TrainContext:
        if ctx.cfg.skip_sanity_check:
            return ctx

        for ax, (algo, model) in enumerate(zip(ctx.algorithms, ctx.models)):
            entity = f"model[{ax}] of {algo!r}"
            with self.inst.timer("sanity_check:model", algo=ax):
                self.call(entity, probe, model, entity=entity, log=ctx.log)
        return ctx
