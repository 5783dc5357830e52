# evalflow/engine/builtin.py
from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from evalflow.engine.base import Preparator, Serving
from evalflow.pipeline.context import RuntimeContext


class IdentityPreparator(Preparator):
    """Prepared data == training data."""

    def prepare(self, runtime: RuntimeContext, training_data: Any) -> Any:
        return training_data


class FirstServing(Serving):
    """Serve the prediction of the first algorithm."""

    def serve(self, query: Any, predictions: Sequence[Any]) -> Any:
        if not predictions:
            raise ValueError("FirstServing needs at least one prediction")
        return predictions[0]


class AverageServing(Serving):
    """Serve the arithmetic mean of numeric predictions."""

    def serve(self, query: Any, predictions: Sequence[float]) -> float:
        if not predictions:
            raise ValueError("AverageServing needs at least one prediction")
        return float(np.mean(np.asarray(predictions, dtype=float)))
