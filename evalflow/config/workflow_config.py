# evalflow/config/workflow_config.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from evalflow.pipeline.parallel.types import ParallelBackend


class IntegrityPolicy(str, Enum):
    FAIL = "fail"
    DROP = "drop"


class ExecutionConfig(BaseModel):
    """
    How partitioned work is dispatched.

    max_workers=None -> one worker per CPU (capped by task count)
    max_workers=1    -> sequential, in submission order
    """

    max_workers: Optional[int] = Field(default=1, ge=1)
    backend: ParallelBackend = ParallelBackend.THREAD
    num_partitions: int = Field(default=4, ge=1)


class WorkflowConfig(BaseModel):
    """
    WorkflowConfig（FINAL）

    - sanity / early-stop flags only affect the train workflow
    - integrity_policy only affects the evaluate workflow
    """

    skip_sanity_check: bool = False
    stop_after_read: bool = False
    stop_after_prepare: bool = False

    integrity_policy: IntegrityPolicy = IntegrityPolicy.FAIL
    instrumentation: bool = True

    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)


class EngineConfig(BaseModel):
    # "package.module:factory"
    factory: str
    params: Dict[str, Any] = Field(default_factory=dict)
