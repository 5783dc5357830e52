# evalflow/utils/errors.py
from __future__ import annotations

from typing import Optional


class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided config (paths, factories, flags).
    Should NOT print traceback.
    """


class WorkflowError(RuntimeError):
    """
    Base of every fatal workflow failure.

    ``stage`` / ``entity`` say where it happened; they are filled in by the
    stage guard when the raiser did not know them.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        entity: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.entity = entity

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        if self.entity is None:
            return f"[{self.stage}] {self.message}"
        return f"[{self.stage}] {self.entity}: {self.message}"


class StorageError(WorkflowError):
    """Backing-store access failure raised by a DataSource."""


class ValidationError(WorkflowError):
    """Sanity check violation raised by a stage output."""


class IntegrityError(WorkflowError):
    """Internal invariant violation (e.g. prediction vector mismatch)."""


class StageError(WorkflowError):
    """Any other exception escaping a stage call; the cause is chained."""

    def __init__(self, stage: str, entity: str, cause: BaseException):
        super().__init__(
            f"{type(cause).__name__}: {cause}",
            stage=stage,
            entity=entity,
        )
        self.cause = cause

    def __reduce__(self):
        # crosses process boundaries (process backend); keep stage / entity
        return type(self), (self.stage, self.entity, self.cause)
