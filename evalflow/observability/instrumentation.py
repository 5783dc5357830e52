# evalflow/observability/instrumentation.py
from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Dict, Optional

from evalflow.observability.metrics import MetricRecorder, Span
from evalflow.observability.progress import ProgressReporter
from evalflow.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Instrumentation（Leaf-only accounting + Parent scope）

    Rules:
    1. timeline only holds leaf spans (record=True), keyed by Span
    2. parent timers (record=False) only bound wall-time
    3. spans measured elsewhere (worker processes) enter via add_span
    """

    enabled: bool = True

    def __post_init__(self):
        self.progress = ProgressReporter(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)
        self.timeline: Dict[Span, float] = OrderedDict()

    def timer(
            self,
            step: str,
            *,
            fold: Optional[int] = None,
            algo: Optional[int] = None,
            record: bool = True,
    ):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            start = perf_counter()
            try:
                yield
            finally:
                if record:
                    inst.add_span(step, perf_counter() - start, fold=fold, algo=algo)

        return _ctx()

    def add_span(
            self,
            step: str,
            seconds: float,
            *,
            fold: Optional[int] = None,
            algo: Optional[int] = None,
    ) -> None:
        if not self.enabled:
            return
        span = Span(step, fold, algo)
        self.timeline[span] = self.timeline.get(span, 0.0) + seconds

    def generate_timeline_report(self, label: str):
        if not self.enabled:
            return
        TimelineReporter(self.timeline, label).print()


class NoOpInstrumentation(Instrumentation):
    """Instrumentation disabled 时使用。"""

    def __init__(self):
        super().__init__(enabled=False)
