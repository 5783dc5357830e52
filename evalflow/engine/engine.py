# evalflow/engine/engine.py
from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from evalflow.config.workflow_config import EngineConfig, WorkflowConfig
from evalflow.engine.base import Algorithm, DataSource, Preparator, Serving
from evalflow.observability.instrumentation import Instrumentation
from evalflow.utils.errors import UserInputError
from evalflow.workflow.evaluate import EvaluateWorkflow
from evalflow.workflow.result import FoldResult, TrainResult
from evalflow.workflow.train import TrainWorkflow


@dataclass
class Engine:
    """
    Engine = the four stages of one deployable model pipeline.

    algorithms keep their list order; that order is the algorithm index
    used by both workflows.
    """

    data_source: DataSource
    preparator: Preparator
    algorithms: List[Algorithm] = field(default_factory=list)
    serving: Optional[Serving] = None

    def train(
            self,
            cfg: Optional[WorkflowConfig] = None,
            inst: Optional[Instrumentation] = None,
            run_id: Optional[str] = None,
    ) -> TrainResult:
        return TrainWorkflow(
            self.data_source,
            self.preparator,
            self.algorithms,
            cfg=cfg,
            inst=inst,
        ).run(run_id=run_id)

    def evaluate(
            self,
            cfg: Optional[WorkflowConfig] = None,
            inst: Optional[Instrumentation] = None,
            run_id: Optional[str] = None,
    ) -> List[FoldResult]:
        if self.serving is None:
            raise UserInputError("Engine.evaluate needs a serving stage")
        return EvaluateWorkflow(
            self.data_source,
            self.preparator,
            self.algorithms,
            self.serving,
            cfg=cfg,
            inst=inst,
        ).run(run_id=run_id)


def load_engine_factory(path: str) -> Callable[..., Engine]:
    """
    "package.module:attr" -> callable returning an Engine
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise UserInputError(
            f"engine factory must look like 'package.module:attr', got {path!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise UserInputError(f"cannot import engine module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise UserInputError(f"{path!r} is not a callable engine factory")
    return factory


def build_engine(cfg: EngineConfig) -> Engine:
    factory = load_engine_factory(cfg.factory)
    engine = factory(**cfg.params)
    if not isinstance(engine, Engine):
        raise UserInputError(
            f"{cfg.factory} returned {type(engine).__name__}, expected Engine"
        )
    return engine
