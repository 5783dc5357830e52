#!filepath: evalflow/pipeline/step.py
from __future__ import annotations

from typing import Any, Callable

from evalflow.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)
from evalflow.utils.errors import StageError, WorkflowError


class PipelineStep:
    """
    Pipeline Step 基类

    Responsibilities:
      1. orchestration of one logical stage over the workflow context
      2. step-level time boundary (parent scope, not recorded)
      3. stage-call guard: every failure leaves with stage + entity

    Rules:
      - a Step never swallows a stage failure
      - Step behaviour does not depend on whether inst is enabled
    """

    stage: str = ""

    def __init__(self, inst: Instrumentation | None = None):
        # 永远保证 inst 可用（No-op 语义）
        self.inst: Instrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        return self.inst.timer(self.step_name, record=False)

    # --------------------------------------------------
    # Contract
    # --------------------------------------------------
    def run(self, ctx):
        raise NotImplementedError

    # --------------------------------------------------
    # Stage-call guard
    # --------------------------------------------------
    def call(self, entity: Any, fn: Callable, /, *args, stage: str | None = None, **kwargs):
        """
        Invoke a collaborator and attribute any failure to (stage, entity).

        WorkflowError subclasses keep their type (StorageError stays a
        StorageError); anything else is wrapped in StageError.
        """
        return guard(stage or self.stage, entity, fn, *args, **kwargs)


def guard(stage: str, entity: Any, fn: Callable, /, *args, **kwargs):
    name = describe(entity)
    try:
        return fn(*args, **kwargs)
    except WorkflowError as e:
        if e.stage is None:
            e.stage = stage
        if e.entity is None:
            e.entity = name
        raise
    except Exception as e:
        raise StageError(stage, name, e) from e


def describe(entity: Any) -> str:
    if isinstance(entity, str):
        return entity
    return repr(entity)
