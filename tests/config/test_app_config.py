# tests/config/test_app_config.py
import pytest
from pydantic import ValidationError

from evalflow.config.app_config import AppConfig
from evalflow.config.workflow_config import ExecutionConfig, IntegrityPolicy, WorkflowConfig
from evalflow.pipeline.parallel.types import ParallelBackend


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("EVALFLOW_CONFIG", "EVALFLOW_LOG_LEVEL", "EVALFLOW_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    # no stray .env gets picked up
    monkeypatch.chdir(tmp_path)


def write(tmp_path, text: str) -> str:
    path = tmp_path / "evalflow.yml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_defaults():
    cfg = WorkflowConfig()

    assert cfg.skip_sanity_check is False
    assert cfg.stop_after_read is False
    assert cfg.stop_after_prepare is False
    assert cfg.integrity_policy == IntegrityPolicy.FAIL
    assert cfg.execution.max_workers == 1
    assert cfg.execution.backend == ParallelBackend.THREAD


def test_load_yaml(tmp_path):
    path = write(
        tmp_path,
        """
log:
  level: DEBUG
workflow:
  stop_after_prepare: true
  integrity_policy: drop
  execution:
    max_workers: 4
    backend: process
    num_partitions: 8
engine:
  factory: "fakes:make_engine"
  params:
    n_folds: 5
""",
    )

    cfg = AppConfig.load(path)

    assert cfg.log.level == "DEBUG"
    assert cfg.workflow.stop_after_prepare is True
    assert cfg.workflow.integrity_policy == IntegrityPolicy.DROP
    assert cfg.workflow.execution == ExecutionConfig(
        max_workers=4, backend=ParallelBackend.PROCESS, num_partitions=8
    )
    assert cfg.engine.factory == "fakes:make_engine"
    assert cfg.engine.params == {"n_folds": 5}


def test_empty_file_gives_defaults(tmp_path):
    cfg = AppConfig.load(write(tmp_path, ""))

    assert cfg.engine is None
    assert cfg.workflow == WorkflowConfig()


def test_default_path_and_env_path(tmp_path, monkeypatch):
    write(tmp_path, "log:\n  level: WARNING\n")
    assert AppConfig.load().log.level == "WARNING"

    other = tmp_path / "other.yml"
    other.write_text("log:\n  level: ERROR\n", encoding="utf-8")
    monkeypatch.setenv("EVALFLOW_CONFIG", str(other))
    assert AppConfig.load().log.level == "ERROR"


def test_env_overrides_log_settings(tmp_path, monkeypatch):
    path = write(tmp_path, "log:\n  level: INFO\n")
    monkeypatch.setenv("EVALFLOW_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("EVALFLOW_LOG_DIR", str(tmp_path / "logs"))

    cfg = AppConfig.load(path)

    assert cfg.log.level == "DEBUG"
    assert cfg.log.dir == str(tmp_path / "logs")


def test_dotenv_is_loaded(tmp_path, monkeypatch):
    # registers the variable so teardown removes what load_dotenv sets
    monkeypatch.setenv("EVALFLOW_LOG_LEVEL", "unset")
    monkeypatch.delenv("EVALFLOW_LOG_LEVEL")

    path = write(tmp_path, "")
    (tmp_path / ".env").write_text("EVALFLOW_LOG_LEVEL=ERROR\n", encoding="utf-8")

    cfg = AppConfig.load(path)

    assert cfg.log.level == "ERROR"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        AppConfig.load(str(tmp_path / "nope.yml"))


@pytest.mark.parametrize(
    "text",
    [
        "workflow:\n  integrity_policy: ignore\n",
        "workflow:\n  execution:\n    max_workers: 0\n",
        "engine:\n  params: {}\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path, text):
    with pytest.raises(ValidationError):
        AppConfig.load(write(tmp_path, text))
