#!filepath: evalflow/cli.py
from __future__ import annotations

from typing import Optional, Tuple

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from evalflow import __version__
from evalflow.config.app_config import AppConfig
from evalflow.engine.engine import Engine, build_engine
from evalflow.evaluation.metrics import METRICS
from evalflow.utils.errors import UserInputError, WorkflowError
from evalflow.utils.logger import init_logging, logs
from evalflow.workflow.result import StoppedEarly

app = typer.Typer(help="evalflow train / evaluate CLI")


def _load(config: Optional[str]) -> Tuple[AppConfig, Engine]:
    cfg = AppConfig.load(config)
    init_logging(cfg.log)
    if cfg.engine is None:
        raise UserInputError("config has no 'engine' section")
    return cfg, build_engine(cfg.engine)


def _fail(e: Exception, code: int):
    if isinstance(e, WorkflowError):
        logs.error(f"[CLI] workflow failed: {type(e).__name__}: {e}")
    print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
    raise typer.Exit(code)


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def train(
        config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML config"),
        run_id: Optional[str] = typer.Option(None, "--run-id"),
        stop_after_read: bool = typer.Option(False, "--stop-after-read"),
        stop_after_prepare: bool = typer.Option(False, "--stop-after-prepare"),
        skip_sanity_check: bool = typer.Option(False, "--skip-sanity-check"),
):
    """
    Train every algorithm once on the engine's training data.
    """
    try:
        cfg, engine = _load(config)
    except (UserInputError, FileNotFoundError, ValueError) as e:
        _fail(e, 2)

    # flags only switch things on; config values stay otherwise
    overrides = {
        k: True
        for k, v in {
            "stop_after_read": stop_after_read,
            "stop_after_prepare": stop_after_prepare,
            "skip_sanity_check": skip_sanity_check,
        }.items()
        if v
    }
    wf = cfg.workflow.model_copy(update=overrides)

    try:
        result = engine.train(cfg=wf, run_id=run_id)
    except WorkflowError as e:
        _fail(e, 1)

    if isinstance(result, StoppedEarly):
        print(f"[yellow]Stopped early at {result.checkpoint.value}[/yellow]")
        return

    print(f"[green]Trained {len(result.models)} model(s)[/green]")
    for ax, model in enumerate(result.models):
        print(f"  [{ax}] {type(model).__name__}")


@app.command(name="eval")
def evaluate(
        config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML config"),
        run_id: Optional[str] = typer.Option(None, "--run-id"),
        metric: Optional[str] = typer.Option(None, "--metric", help="accuracy | mse"),
):
    """
    Cross-validate every algorithm on every fold.
    """
    if metric is not None and metric not in METRICS:
        _fail(UserInputError(f"unknown metric {metric!r}; choose from {sorted(METRICS)}"), 2)

    try:
        cfg, engine = _load(config)
        folds = engine.evaluate(cfg=cfg.workflow, run_id=run_id)
    # ValueError: invalid config values or an engine the workflow rejects
    except (UserInputError, FileNotFoundError, ValueError) as e:
        _fail(e, 2)
    except WorkflowError as e:
        _fail(e, 1)

    table = Table(title="Evaluation")
    table.add_column("fold")
    table.add_column("info")
    table.add_column("results", justify="right")
    table.add_column("dropped", justify="right")

    m = METRICS[metric]() if metric else None
    if m is not None:
        table.add_column(m.header, justify="right")

    for fr in folds:
        row = [str(fr.index), str(fr.info), str(fr.results.count()), str(fr.dropped)]
        if m is not None:
            row.append(f"{m.calculate([fr]):.6f}")
        table.add_row(*row)

    print(table)
    if m is not None:
        print(f"[green]{m.header}: {m.calculate(folds):.6f}[/green]")


if __name__ == "__main__":
    app()

# python -m evalflow.cli eval -c evalflow.yml --metric accuracy
