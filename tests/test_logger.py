# tests/test_logger.py
import pickle

import pytest
from loguru import logger

from evalflow.config.log_config import LogConfig
from evalflow.utils import logger as logger_module
from evalflow.utils.logger import Logging, init_logging, logs


def test_bind_carries_extra_into_records():
    records = []
    sink_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")

    handle = logs.bind(workflow="evaluate", run_id="r1")
    handle.info("hello")
    logger.remove(sink_id)

    assert handle.extra == {"workflow": "evaluate", "run_id": "r1"}
    assert logs.extra == {}
    assert records[-1]["extra"] == {"workflow": "evaluate", "run_id": "r1"}
    assert records[-1]["message"] == "hello"


def test_nested_bind_merges():
    handle = logs.bind(workflow="train").bind(run_id="r2")
    assert handle.extra == {"workflow": "train", "run_id": "r2"}


def test_catch_logs_and_reraises(captured_logs):
    log = Logging(configure=False)

    @log.catch("division failed", log_time=False)
    def divide(a, b):
        return a / b

    assert divide(4, 2) == 2

    with pytest.raises(ZeroDivisionError):
        divide(1, 0)

    assert any("divide: division failed" in line for line in captured_logs)


def test_init_logging_with_file_sink(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "logs", logger_module.logs)

    log = init_logging(LogConfig(dir=str(tmp_path / "logs"), level="DEBUG"))
    log.info("written to file")
    logger.complete()
    logger.remove()

    assert logger_module.logs is log
    files = list((tmp_path / "logs").glob("*.log"))
    assert len(files) == 1
    assert "written to file" in files[0].read_text(encoding="utf-8")


def test_bound_handle_pickles_without_sinks(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "logs", logger_module.logs)
    init_logging(LogConfig(dir=str(tmp_path / "logs")))
    handle = logger_module.logs.bind(workflow="evaluate", run_id="r9")

    restored = pickle.loads(pickle.dumps(handle))

    assert restored.extra == {"workflow": "evaluate", "run_id": "r9"}
    assert restored.log_dir == str(tmp_path / "logs")

    records = []
    sink_id = logger.add(lambda msg: records.append(msg.record))
    restored.info("from a worker")
    logger.remove(sink_id)
    logger.complete()
    logger.remove()

    assert records[-1]["extra"] == {"workflow": "evaluate", "run_id": "r9"}
