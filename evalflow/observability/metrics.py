# evalflow/observability/metrics.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pandas as pd

from evalflow.utils.logger import logs


@dataclass(frozen=True)
class Span:
    """
    Where a measurement belongs: a workflow step, optionally narrowed to
    one fold (EX) and / or one algorithm (AX).
    """

    step: str
    fold: Optional[int] = None
    algo: Optional[int] = None

    def __str__(self) -> str:
        scope = []
        if self.fold is not None:
            scope.append(f"fold={self.fold}")
        if self.algo is not None:
            scope.append(f"algo={self.algo}")
        return f"{self.step}[{', '.join(scope)}]" if scope else self.step


@dataclass
class MetricRecorder:
    """
    Run counters keyed by Span, e.g. ("queries", fold=1) or ("algo_count").
    """

    enabled: bool = True
    metrics: Dict[Span, Any] = field(default_factory=dict)

    def record(
            self,
            name: str,
            value: Any,
            *,
            fold: Optional[int] = None,
            algo: Optional[int] = None,
    ) -> None:
        if not self.enabled:
            return
        key = Span(name, fold, algo)
        self.metrics[key] = value
        logs.debug(f"[Metric] {key} = {value}")

    def get(self, name: str, *, fold: Optional[int] = None, algo: Optional[int] = None, default=None):
        return self.metrics.get(Span(name, fold, algo), default)

    def per_fold(self, name: str) -> Dict[int, Any]:
        """{fold: value} for a fold-scoped counter."""
        found = {
            k.fold: v
            for k, v in self.metrics.items()
            if k.step == name and k.fold is not None and k.algo is None
        }
        return dict(sorted(found.items()))

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"name": k.step, "fold": k.fold, "algo": k.algo, "value": v}
            for k, v in self.metrics.items()
        ]
        return pd.DataFrame(rows, columns=["name", "fold", "algo", "value"])
