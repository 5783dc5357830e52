# evalflow/engine/sanity.py
from __future__ import annotations

from abc import ABC, abstractmethod


class SanityCheck(ABC):
    """
    Optional capability of a stage output (training data, prepared data,
    model).

    Inherit it to opt in. ``sanity_check`` raises
    ``evalflow.utils.errors.ValidationError`` on violation and returns None
    otherwise.
    """

    @abstractmethod
    def sanity_check(self) -> None:
        ...
