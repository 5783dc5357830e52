# evalflow/observability/progress.py
from typing import Dict

from evalflow.utils.logger import logs


class ProgressReporter:
    """
    Unit counters per workflow stage (folds prepared, models trained, ...).

    One log line per advance; nothing is drawn, so output stays readable
    under pytest and in CI logs.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._total: Dict[str, int] = {}
        self._done: Dict[str, int] = {}

    def start(self, stage: str, total: int, unit: str = "folds"):
        if not self.enabled:
            return
        self._total[stage] = total
        self._done[stage] = 0
        logs.info(f"[Progress] {stage}: 0/{total} {unit}")

    def advance(self, stage: str, n: int = 1) -> int:
        if not self.enabled:
            return 0
        done = self._done.get(stage, 0) + n
        self._done[stage] = done
        logs.info(f"[Progress] {stage}: {done}/{self._total.get(stage, '?')}")
        return done

    def remaining(self, stage: str) -> int:
        return self._total.get(stage, 0) - self._done.get(stage, 0)
