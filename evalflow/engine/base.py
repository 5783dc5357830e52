# evalflow/engine/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any, Generic, Optional, Sequence, Tuple, TypeVar

from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.parallel.collection import PartitionedCollection
from evalflow.utils.errors import IntegrityError

TD = TypeVar("TD")  # training data
EI = TypeVar("EI")  # evaluation info
PD = TypeVar("PD")  # prepared data
M = TypeVar("M")    # model
Q = TypeVar("Q")    # query
P = TypeVar("P")    # prediction
A = TypeVar("A")    # actual


class Stage:
    """Common repr for stage implementations: ClassName(public attrs)."""

    def __repr__(self) -> str:
        params = ", ".join(
            f"{k}={v!r}" for k, v in vars(self).items() if not k.startswith("_")
        )
        return f"{type(self).__name__}({params})"


class DataSource(Stage, ABC, Generic[TD, EI, Q, A]):
    """
    Data ingestion.

    read_training may raise StorageError on backing-store failure.
    read_eval returns one (training data, eval info, held-out (query, actual)
    collection) triple per fold; the held-out part may be a
    PartitionedCollection or any iterable.
    """

    @abstractmethod
    def read_training(self, runtime: RuntimeContext) -> TD:
        ...

    def read_eval(self, runtime: RuntimeContext) -> Sequence[Tuple[TD, EI, Any]]:
        raise NotImplementedError(
            f"{type(self).__name__} does not support evaluation"
        )


class Preparator(Stage, ABC, Generic[TD, PD]):
    @abstractmethod
    def prepare(self, runtime: RuntimeContext, training_data: TD) -> PD:
        ...


class Algorithm(Stage, ABC, Generic[PD, M, Q, P]):
    """
    Algorithm

    - train: prepared data -> model
    - batch_predict: (qid, query) collection -> (qid, prediction) collection
    - predict: single query; the default batch_predict maps it over queries

    ``model_type`` (optional) is checked when a model is bound to its
    algorithm.
    """

    model_type: Optional[type] = None

    @abstractmethod
    def train(self, runtime: RuntimeContext, prepared: PD) -> M:
        ...

    def predict(self, model: M, query: Q) -> P:
        raise NotImplementedError(
            f"{type(self).__name__} implements neither predict nor batch_predict"
        )

    def batch_predict(
            self,
            runtime: RuntimeContext,
            model: M,
            queries: PartitionedCollection,
    ) -> PartitionedCollection:
        return queries.map_values(partial(self.predict, model))


class Serving(Stage, ABC, Generic[Q, P]):
    @abstractmethod
    def serve(self, query: Q, predictions: Sequence[P]) -> P:
        ...


@dataclass(frozen=True)
class BoundModel(Generic[M]):
    """
    A model paired with the one algorithm allowed to consume it.
    """

    ax: int
    algorithm: Algorithm
    model: M

    @classmethod
    def bind(cls, ax: int, algorithm: Algorithm, model: M) -> "BoundModel[M]":
        expected = algorithm.model_type
        if expected is not None and not isinstance(model, expected):
            raise IntegrityError(
                f"algorithm {ax} produced {type(model).__name__}, "
                f"declared model_type is {expected.__name__}",
                entity=repr(algorithm),
            )
        return cls(ax=ax, algorithm=algorithm, model=model)

    def batch_predict(
            self,
            runtime: RuntimeContext,
            queries: PartitionedCollection,
    ) -> PartitionedCollection:
        return self.algorithm.batch_predict(runtime, self.model, queries)
