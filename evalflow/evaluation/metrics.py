# evalflow/evaluation/metrics.py
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Dict, List, Sequence, Type

import numpy as np

from evalflow.workflow.result import FoldResult


class Metric(ABC):
    """
    Metric over evaluate-workflow output.
    """

    header: str = "Metric"

    @abstractmethod
    def calculate(self, fold_results: Sequence[FoldResult]) -> float:
        ...

    def calculate_per_fold(self, fold_results: Sequence[FoldResult]) -> List[float]:
        return [self.calculate([fr]) for fr in fold_results]


class AverageMetric(Metric):
    """
    Mean of score(query, prediction, actual) over every result tuple of
    every fold. Partitions contribute (sum, count) pairs; nothing else is
    collected. No tuples -> nan.
    """

    @abstractmethod
    def score(self, query: Any, prediction: Any, actual: Any) -> float:
        ...

    def calculate(self, fold_results: Sequence[FoldResult]) -> float:
        total, count = 0.0, 0
        for fr in fold_results:
            for s, c in fr.results.map_partitions(partial(_sum_scores, self)).collect():
                total += s
                count += c

        if count == 0:
            return float("nan")
        return total / count


def _sum_scores(metric: AverageMetric, rows):
    scores = np.fromiter(
        (metric.score(q, p, a) for q, p, a in rows),
        dtype=float,
    )
    return [(float(scores.sum()), int(scores.size))]


class Accuracy(AverageMetric):
    header = "Accuracy"

    def score(self, query, prediction, actual) -> float:
        return 1.0 if prediction == actual else 0.0


class MeanSquaredError(AverageMetric):
    header = "MSE"

    def score(self, query, prediction, actual) -> float:
        return (float(prediction) - float(actual)) ** 2


METRICS: Dict[str, Type[Metric]] = {
    "accuracy": Accuracy,
    "mse": MeanSquaredError,
}
