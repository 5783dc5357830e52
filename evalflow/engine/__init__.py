from .base import Algorithm, BoundModel, DataSource, Preparator, Serving
from .builtin import AverageServing, FirstServing, IdentityPreparator
from .sanity import SanityCheck

__all__ = [
    "Algorithm",
    "BoundModel",
    "DataSource",
    "Preparator",
    "Serving",
    "SanityCheck",
    "IdentityPreparator",
    "FirstServing",
    "AverageServing",
]
