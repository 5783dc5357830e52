# evalflow/workflow/steps/checkpoint_step.py
from __future__ import annotations

from evalflow.pipeline.step import PipelineStep
from evalflow.workflow.context import TrainContext
from evalflow.workflow.result import Checkpoint

_FLAGS = {
    Checkpoint.AFTER_READ: "stop_after_read",
    Checkpoint.AFTER_PREPARE: "stop_after_prepare",
}


class CheckpointStep(PipelineStep):
    """
    Early-stop checkpoint.

    When the matching config flag is set the context is marked aborted;
    the workflow turns that into StoppedEarly. Never raises.
    """

    stage = "checkpoint"

    def __init__(self, checkpoint: Checkpoint, inst=None):
        super().__init__(inst)
        self.checkpoint = checkpoint
        self.flag = _FLAGS[checkpoint]

    def run(self, ctx: TrainContext) -> TrainContext:
        if getattr(ctx.cfg, self.flag):
            ctx.log.info(f"[CheckpointStep] Stopping here because {self.flag} is set.")
            ctx.abort_pipeline = True
            ctx.abort_reason = self.checkpoint
        return ctx
