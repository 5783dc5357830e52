# evalflow/observability/timeline_reporter.py
from collections import OrderedDict
from typing import Dict

from evalflow.observability.metrics import Span
from evalflow.utils.logger import logs


class TimelineReporter:
    """
    Log the leaf spans of one workflow run, then a per-fold subtotal for
    every fold that has fold-scoped spans.
    """

    def __init__(self, timeline: Dict[Span, float], label: str):
        self.timeline = timeline
        self.label = label

    def fold_totals(self) -> Dict[int, float]:
        totals: Dict[int, float] = {}
        for span, sec in self.timeline.items():
            if span.fold is not None:
                totals[span.fold] = totals.get(span.fold, 0.0) + sec
        return OrderedDict(sorted(totals.items()))

    def print(self):
        logs.info(f"[Timeline] ===== Workflow timeline for {self.label} =====")

        for span, sec in self.timeline.items():
            logs.info(f"[Timeline] {str(span):<36} {sec:>8.3f}s")

        for fold, sec in self.fold_totals().items():
            logs.info(f"[Timeline] {'fold ' + str(fold) + ' subtotal':<36} {sec:>8.3f}s")

        total = sum(self.timeline.values())
        logs.info(f"[Timeline] {'Total':<36} {total:>8.3f}s")
