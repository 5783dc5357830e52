# evalflow/workflow/reconcile.py
"""
Prediction reconciliation

Per fold, every algorithm yields an independent (qid, prediction) stream
whose element order is arbitrary. Streams are tagged with the algorithm
index (AX), unioned, grouped by qid and turned into prediction vectors
ordered by AX. Held-out (qid, (query, actual)) pairs are then joined back
by qid. Positions are never used to align anything.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from operator import itemgetter
from typing import Any, List, Sequence, Tuple

from evalflow.config.workflow_config import IntegrityPolicy
from evalflow.engine.base import Serving
from evalflow.pipeline.context import RuntimeContext
from evalflow.pipeline.parallel.collection import PartitionedCollection
from evalflow.utils.errors import IntegrityError

# number of offending qids quoted in a log line / error message
_SAMPLE = 5


@dataclass(frozen=True)
class Reconciled:
    vectors: PartitionedCollection  # (qid, [P ordered by AX])
    dropped: int = 0


# --------------------------------------------------
# element-level functions (module level: picklable)
# --------------------------------------------------
def _swap(pair):
    return pair[1], pair[0]


def _tag(ax: int, qp):
    qid, p = qp
    return qid, (ax, p)


def _axes(tagged: Sequence[Tuple[int, Any]]) -> List[int]:
    return sorted(ax for ax, _ in tagged)


def is_complete(algo_count: int, group) -> bool:
    _, tagged = group
    return _axes(tagged) == list(range(algo_count))


def _is_incomplete(algo_count: int, group) -> bool:
    return not is_complete(algo_count, group)


def assemble_vector(algo_count: int, group) -> Tuple[Any, List[Any]]:
    """
    (qid, [(ax, p), ...]) -> (qid, [p_0, ..., p_{n-1}])

    Exactly one prediction per algorithm index is required: a missing or
    duplicated entry means an algorithm dropped or repeated the query.
    """
    qid, tagged = group
    axes = _axes(tagged)
    if axes != list(range(algo_count)):
        raise IntegrityError(
            f"qid={qid}: expected {algo_count} predictions (one per algorithm), "
            f"got {len(tagged)} from algorithms {axes}"
        )
    return qid, [p for _, p in sorted(tagged, key=itemgetter(0))]


def _has_vector(row) -> bool:
    _, (_, vector) = row
    return vector is not None


def _lacks_vector(row) -> bool:
    return not _has_vector(row)


def _serve(serving: Serving, row):
    _, ((query, actual), vector) = row
    return query, serving.serve(query, vector), actual


# --------------------------------------------------
# collection-level operations
# --------------------------------------------------
def assign_qids(qas: PartitionedCollection) -> PartitionedCollection:
    """(query, actual) -> (qid, (query, actual))"""
    return qas.zip_with_unique_id().map(_swap)


def tag_predictions(ax: int, predictions: PartitionedCollection) -> PartitionedCollection:
    """(qid, p) -> (qid, (ax, p))"""
    return predictions.map(partial(_tag, ax))


def reconcile_predictions(
        runtime: RuntimeContext,
        tagged_streams: Sequence[PartitionedCollection],
        algo_count: int,
        policy: IntegrityPolicy = IntegrityPolicy.FAIL,
) -> Reconciled:
    grouped = runtime.union(list(tagged_streams)).group_by_key()

    if policy == IntegrityPolicy.FAIL:
        return Reconciled(grouped.map(partial(assemble_vector, algo_count)))

    complete = grouped.filter(partial(is_complete, algo_count))
    dropped = grouped.count() - complete.count()
    if dropped:
        sample = [
            qid for qid, _ in
            grouped.filter(partial(_is_incomplete, algo_count)).collect()[:_SAMPLE]
        ]
        runtime.log.warning(
            f"[Reconcile] dropped {dropped} queries with incomplete prediction "
            f"vectors (e.g. qid={sample})"
        )
    return Reconciled(complete.map(partial(assemble_vector, algo_count)), dropped)


def serve_fold(
        runtime: RuntimeContext,
        qas: PartitionedCollection,
        vectors: PartitionedCollection,
        serving: Serving,
        policy: IntegrityPolicy = IntegrityPolicy.FAIL,
) -> Reconciled:
    """
    Join held-out pairs with their vectors and serve them.

    Returns (query, prediction, actual) tuples in ``vectors``; ``dropped``
    counts held-out queries left without a result (policy=drop only).
    Vectors whose qid is not held out are logged, never served.
    """
    joined = qas.left_outer_join(vectors)
    matched = joined.filter(_has_vector)

    missing = joined.count() - matched.count()
    unknown = vectors.count() - matched.count()

    if missing or unknown:
        sample = [qid for qid, _ in joined.filter(_lacks_vector).collect()[:_SAMPLE]]
        detail = (
            f"{missing} held-out queries without predictions (e.g. qid={sample}), "
            f"{unknown} predicted qids not held out"
        )
        if policy == IntegrityPolicy.FAIL:
            raise IntegrityError(detail)
        runtime.log.warning(f"[Reconcile] dropped {detail}")

    results = matched.map(partial(_serve, serving))
    return Reconciled(results, missing)
