"""
Outcome of a best-effort step.

Best-effort steps (stopping yb-platform before a destructive restore, fixing
data directory permissions) must not abort the operation they belong to.
They return a StepResult instead of raising, and the caller decides how to
report a soft failure.
"""

import logging
from typing import Callable, Optional

from pydantic import BaseModel


class StepResult(BaseModel):
    step: str
    ok: bool
    error: str = ""

    @property
    def soft_failed(self) -> bool:
        return not self.ok


def best_effort(
    step: str,
    func: Callable[[], None],
    logger: Optional[logging.Logger] = None,
) -> StepResult:
    """Runs `func`; any exception becomes a logged, soft-failed StepResult."""
    logger_to_use = logger or logging.getLogger(__name__)
    try:
        func()
    except Exception as e:
        logger_to_use.warning(f"{step} failed: {e}. Continuing.")
        return StepResult(step=step, ok=False, error=str(e))
    return StepResult(step=step, ok=True)
