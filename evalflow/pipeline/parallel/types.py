# evalflow/pipeline/parallel/types.py
from enum import Enum


class ParallelKind(str, Enum):
    PARTITION = "partition"
    TRAIN = "train"


class ParallelBackend(str, Enum):
    THREAD = "thread"
    PROCESS = "process"
