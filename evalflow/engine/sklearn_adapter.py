# evalflow/engine/sklearn_adapter.py
"""
scikit-learn adapters

- KFoldDataSource: in-memory (features, labels) split with KFold
- SklearnAlgorithm: any estimator exposing fit / predict

Training data and prepared data are collections of (features, label).
Queries are feature rows; actuals are labels.
"""
from __future__ import annotations

from functools import partial
from typing import Any, Callable, Iterable, List, Optional, Sequence

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.model_selection import KFold

from evalflow.engine.base import Algorithm, DataSource
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.parallel.collection import PartitionedCollection


class KFoldDataSource(DataSource):
    def __init__(
            self,
            features: Sequence[Sequence[float]],
            labels: Sequence[Any],
            n_splits: int = 3,
            shuffle: bool = False,
            random_state: Optional[int] = None,
    ):
        if len(features) != len(labels):
            raise ValueError(
                f"features/labels length mismatch: {len(features)} != {len(labels)}"
            )
        self.n_splits = n_splits
        self.shuffle = shuffle
        self.random_state = random_state
        self._X = np.asarray(features, dtype=float)
        self._y = list(labels)

    def read_training(self, runtime: RuntimeContext) -> PartitionedCollection:
        return runtime.parallelize(self._rows(range(len(self._y))))

    def read_eval(self, runtime: RuntimeContext):
        kf = KFold(
            n_splits=self.n_splits,
            shuffle=self.shuffle,
            random_state=self.random_state if self.shuffle else None,
        )

        folds = []
        for k, (train_idx, test_idx) in enumerate(kf.split(self._X)):
            info = {
                "fold": k,
                "train_size": len(train_idx),
                "test_size": len(test_idx),
            }
            folds.append(
                (
                    runtime.parallelize(self._rows(train_idx)),
                    info,
                    runtime.parallelize(self._rows(test_idx)),
                )
            )
        return folds

    def _rows(self, idx: Iterable[int]) -> List[tuple]:
        return [(tuple(self._X[i].tolist()), self._y[i]) for i in idx]


class SklearnAlgorithm(Algorithm):
    """
    Wrap an estimator factory.

    train collects the prepared rows: scikit-learn estimators fit in memory.
    batch_predict stays per partition.
    """

    model_type = BaseEstimator

    def __init__(self, estimator_factory: Callable[[], Any], name: Optional[str] = None):
        self.name = name or getattr(estimator_factory, "__name__", type(self).__name__)
        self._factory = estimator_factory

    def train(self, runtime: RuntimeContext, prepared) -> Any:
        rows = runtime.as_collection(prepared).collect()
        if not rows:
            raise ValueError("no training rows")

        X = np.asarray([f for f, _ in rows], dtype=float)
        y = np.asarray([label for _, label in rows])

        estimator = self._factory()
        estimator.fit(X, y)
        runtime.log.debug(f"[SklearnAlgorithm] {self.name} fitted rows={len(rows)}")
        return estimator

    def predict(self, model: Any, query: Sequence[float]) -> Any:
        return _to_python(model.predict(np.asarray([query], dtype=float))[0])

    def batch_predict(self, runtime, model, queries: PartitionedCollection) -> PartitionedCollection:
        return queries.map_partitions(partial(_predict_partition, model))


def _predict_partition(model, rows):
    rows = list(rows)
    if not rows:
        return []
    X = np.asarray([q for _, q in rows], dtype=float)
    preds = model.predict(X)
    return [(qid, _to_python(p)) for (qid, _), p in zip(rows, preds)]


def _to_python(value):
    return value.item() if hasattr(value, "item") else value
