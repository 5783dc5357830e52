# evalflow/workflow/sanity.py
from __future__ import annotations

from enum import Enum
from typing import Any

from evalflow.engine.sanity import SanityCheck
from evalflow.utils.errors import ValidationError
from evalflow.utils.logger import Logging, logs


class SanityOutcome(str, Enum):
    CHECKED = "checked"
    UNSUPPORTED = "unsupported"


def probe(output: Any, *, entity: str, log: Logging = logs) -> SanityOutcome:
    """
    Run the sanity check of ``output`` if it declares the capability.

    A missing capability is logged and treated as success. A failing check
    is logged and raised as ValidationError.
    """
    name = f"{entity} ({type(output).__name__})"

    if not isinstance(output, SanityCheck):
        log.info(
            f"[SanityCheck] {name} does not support data sanity check. "
            "Skipping check."
        )
        return SanityOutcome.UNSUPPORTED

    log.info(f"[SanityCheck] {name} supports data sanity check. Performing check.")

    try:
        output.sanity_check()
    except ValidationError as e:
        if e.entity is None:
            e.entity = name
        log.error(f"[SanityCheck] {name} failed: {e.message}")
        raise
    except Exception as e:
        log.error(f"[SanityCheck] {name} raised {type(e).__name__}: {e}")
        raise ValidationError(f"{type(e).__name__}: {e}", entity=name) from e

    return SanityOutcome.CHECKED
