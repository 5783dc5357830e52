from .app_config import AppConfig
from .log_config import LogConfig
from .workflow_config import (
    EngineConfig,
    ExecutionConfig,
    IntegrityPolicy,
    WorkflowConfig,
)

__all__ = [
    "AppConfig",
    "LogConfig",
    "EngineConfig",
    "ExecutionConfig",
    "IntegrityPolicy",
    "WorkflowConfig",
]
