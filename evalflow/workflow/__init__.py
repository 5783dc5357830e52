from .evaluate import EvaluateWorkflow
from .result import Checkpoint, Completed, FoldResult, StoppedEarly, TrainResult
from .sanity import SanityOutcome, probe
from .train import TrainWorkflow

__all__ = [
    "EvaluateWorkflow",
    "TrainWorkflow",
    "Checkpoint",
    "Completed",
    "StoppedEarly",
    "TrainResult",
    "FoldResult",
    "SanityOutcome",
    "probe",
]
