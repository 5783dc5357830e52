# tests/test_cli.py
import pytest
from typer.testing import CliRunner

from evalflow import __version__
from evalflow.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("EVALFLOW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("EVALFLOW_LOG_DIR", raising=False)
    monkeypatch.chdir(tmp_path)

    def write(body: str = "") -> str:
        path = tmp_path / "evalflow.yml"
        path.write_text(
            "log:\n"
            "  level: WARNING\n"
            "workflow:\n"
            "  instrumentation: false\n"
            + body,
            encoding="utf-8",
        )
        return str(path)

    return write


ENGINE = 'engine:\n  factory: "fakes:make_engine"\n'


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_train(config_file):
    result = runner.invoke(app, ["train", "-c", config_file(ENGINE)])

    assert result.exit_code == 0, result.stdout
    assert "Trained 2 model(s)" in result.stdout


def test_train_stop_after_read(config_file):
    result = runner.invoke(app, ["train", "-c", config_file(ENGINE), "--stop-after-read"])

    assert result.exit_code == 0
    assert "Stopped early at after_read" in result.stdout


def test_eval_with_metric(config_file):
    path = config_file(ENGINE + "  params:\n    n_folds: 3\n")

    result = runner.invoke(app, ["eval", "-c", path, "--metric", "accuracy"])

    assert result.exit_code == 0, result.stdout
    assert "Evaluation" in result.stdout
    assert "Accuracy: 0.000000" in result.stdout


def test_unknown_metric_is_user_error(config_file):
    result = runner.invoke(app, ["eval", "-c", config_file(ENGINE), "--metric", "f1"])

    assert result.exit_code == 2
    assert "unknown metric" in result.stdout


def test_missing_config_exits_2(tmp_path):
    result = runner.invoke(app, ["train", "-c", str(tmp_path / "missing.yml")])

    assert result.exit_code == 2
    assert "Config file not found" in result.stdout


def test_missing_engine_section_exits_2(config_file):
    result = runner.invoke(app, ["train", "-c", config_file()])

    assert result.exit_code == 2
    assert "no 'engine' section" in result.stdout


def test_workflow_failure_exits_1(config_file):
    # a fold missing its held-out part is rejected at read time
    path = config_file('engine:\n  factory: "fakes:make_broken_engine"\n')

    result = runner.invoke(app, ["eval", "-c", path])

    assert result.exit_code == 1
    assert "IntegrityError" in result.stdout


def test_engine_without_algorithms_exits_2(config_file):
    path = config_file('engine:\n  factory: "fakes:make_empty_engine"\n')

    result = runner.invoke(app, ["eval", "-c", path])

    assert result.exit_code == 2
    assert "at least one algorithm" in result.stdout


def test_invalid_config_value_exits_2(config_file):
    path = config_file("  integrity_policy: ignore\n" + ENGINE)

    result = runner.invoke(app, ["train", "-c", path])

    assert result.exit_code == 2
    assert "ValidationError" in result.stdout
