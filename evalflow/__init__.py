#!filepath: evalflow/__init__.py

from .utils.logger import Logging, logs, init_logging
from .config.app_config import AppConfig
from .config.workflow_config import WorkflowConfig, ExecutionConfig, IntegrityPolicy
from .engine.base import Algorithm, DataSource, Preparator, Serving
from .engine.sanity import SanityCheck
from .workflow.train import TrainWorkflow
from .workflow.evaluate import EvaluateWorkflow
from .workflow.result import Checkpoint, Completed, StoppedEarly, FoldResult

__version__ = "0.1.0"

__all__ = [
    "logs", "Logging", "init_logging",
    "AppConfig", "WorkflowConfig", "ExecutionConfig", "IntegrityPolicy",
    "DataSource", "Preparator", "Algorithm", "Serving", "SanityCheck",
    "TrainWorkflow", "EvaluateWorkflow",
    "Checkpoint", "Completed", "StoppedEarly", "FoldResult",
]
