# tests/fakes.py
"""
In-memory stages for workflow tests.

Every stage appends to a shared ``calls`` list so tests can assert which
collaborators ran and in which order.
"""
from __future__ import annotations

import random
from typing import Any, List, Optional

import numpy as np

from evalflow.engine.base import Algorithm, DataSource, Preparator, Serving
from evalflow.engine.builtin import IdentityPreparator
from evalflow.engine.engine import Engine
from evalflow.engine.sanity import SanityCheck
from evalflow.utils.errors import ValidationError


class CheckedData(SanityCheck):
    def __init__(self, payload: Any = None, ok: bool = True):
        self.payload = payload
        self.ok = ok
        self.checked = 0

    def sanity_check(self) -> None:
        self.checked += 1
        if not self.ok:
            raise ValidationError("payload is empty")


class ListDataSource(DataSource):
    def __init__(
            self,
            training: Any = None,
            folds: Optional[list] = None,
            calls: Optional[list] = None,
            error: Optional[Exception] = None,
    ):
        self.training = training
        self.folds = folds or []
        self.calls = calls if calls is not None else []
        self.error = error

    def read_training(self, runtime):
        self.calls.append("read_training")
        if self.error is not None:
            raise self.error
        return self.training

    def read_eval(self, runtime):
        self.calls.append("read_eval")
        return self.folds


class RecordingPreparator(Preparator):
    def __init__(self, calls: list, result: Any = None):
        self.calls = calls
        self.result = result

    def prepare(self, runtime, training_data):
        self.calls.append("prepare")
        if self.result is not None:
            return self.result
        return training_data


class ConstAlgorithm(Algorithm):
    """Predicts ``value`` for every query; the model remembers its data."""

    def __init__(self, value: Any, calls: Optional[list] = None):
        self.value = value
        self.calls = calls if calls is not None else []

    def train(self, runtime, prepared):
        self.calls.append(("train", self.value))
        return {"algo": self.value, "data": prepared}

    def predict(self, model, query):
        return model["algo"]


class ShuffledAlgorithm(ConstAlgorithm):
    """Same predictions as ConstAlgorithm, emitted in a scrambled order."""

    def batch_predict(self, runtime, model, queries):
        rows = [(qid, self.value) for qid, _ in queries.collect()]
        random.Random(7).shuffle(rows)
        return runtime.parallelize(rows, num_partitions=2)


class DroppingAlgorithm(ConstAlgorithm):
    """Silently loses one query."""

    def __init__(self, value: Any, drop_query: Any, calls: Optional[list] = None):
        super().__init__(value, calls)
        self.drop_query = drop_query

    def batch_predict(self, runtime, model, queries):
        return queries.filter(lambda qq: qq[1] != self.drop_query).map_values(
            lambda q: self.value
        )


class DuplicatingAlgorithm(ConstAlgorithm):
    """Answers every query twice."""

    def batch_predict(self, runtime, model, queries):
        return queries.flat_map(lambda qq: [(qq[0], self.value), (qq[0], self.value)])


class QueryEchoAlgorithm(Algorithm):
    """Prediction = f"{tag}:{query}"; lets tests check the qid join."""

    def __init__(self, tag: str):
        self.tag = tag

    def train(self, runtime, prepared):
        return self.tag

    def predict(self, model, query):
        return f"{model}:{query}"


class CheckedModelAlgorithm(Algorithm):
    def __init__(self, ok: bool = True):
        self.ok = ok

    def train(self, runtime, prepared):
        return CheckedData(payload="model", ok=self.ok)

    def predict(self, model, query):
        return model.payload


class ExplodingAlgorithm(ConstAlgorithm):
    def train(self, runtime, prepared):
        raise RuntimeError("out of memory")


class ConcatServing(Serving):
    def serve(self, query, predictions: List[str]) -> str:
        return "".join(predictions)


def make_folds(n_folds: int, n_queries: int) -> list:
    """Fold k: training data "td{k}", info {"fold": k}, queries q{k}_{i} -> a{k}_{i}."""
    return [
        (
            f"td{k}",
            {"fold": k},
            [(f"q{k}_{i}", f"a{k}_{i}") for i in range(n_queries)],
        )
        for k in range(n_folds)
    ]


def make_engine(n_folds: int = 2, n_queries: int = 3) -> Engine:
    """Engine factory used by the CLI / factory tests."""
    return Engine(
        data_source=ListDataSource(training="td", folds=make_folds(n_folds, n_queries)),
        preparator=IdentityPreparator(),
        algorithms=[ConstAlgorithm("a"), ConstAlgorithm("b")],
        serving=ConcatServing(),
    )


def not_an_engine():
    return "nope"


def make_broken_engine() -> Engine:
    """Its only fold lacks the held-out part."""
    return Engine(
        data_source=ListDataSource(training="td", folds=[("td0", {"fold": 0})]),
        preparator=IdentityPreparator(),
        algorithms=[ConstAlgorithm("a")],
        serving=ConcatServing(),
    )


def _numpy_qid(qp):
    qid, _ = qp
    return np.int64(qid), "b"


class NumpyQidAlgorithm(ConstAlgorithm):
    """Hands qids back as numpy integers, as array-based predictors do."""

    def __init__(self, calls: Optional[list] = None):
        super().__init__("b", calls)

    def batch_predict(self, runtime, model, queries):
        return queries.map(_numpy_qid)


def make_empty_engine() -> Engine:
    """Evaluation rejects an engine without algorithms."""
    return Engine(
        data_source=ListDataSource(training="td", folds=make_folds(1, 1)),
        preparator=IdentityPreparator(),
        algorithms=[],
        serving=ConcatServing(),
    )
