# tests/conftest.py
from __future__ import annotations

import pytest
from loguru import logger

from evalflow.config.workflow_config import ExecutionConfig, WorkflowConfig
from evalflow.pipeline.context import RuntimeContext


def _discard(msg):
    pass


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(_discard)
    yield


@pytest.fixture
def captured_logs():
    """
    Temporary loguru sink; yields the list of formatted records.
    """
    captured: list[str] = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)), level="DEBUG")
    yield captured
    logger.remove(sink_id)


@pytest.fixture
def runtime() -> RuntimeContext:
    return RuntimeContext(execution=ExecutionConfig(num_partitions=3))


@pytest.fixture
def cfg() -> WorkflowConfig:
    return WorkflowConfig(
        instrumentation=False,
        execution=ExecutionConfig(num_partitions=3),
    )


@pytest.fixture
def parallel_cfg() -> WorkflowConfig:
    return WorkflowConfig(
        instrumentation=False,
        execution=ExecutionConfig(max_workers=4, num_partitions=4),
    )
