"""
Sequential step executor.

A pipeline is an ordered list of named steps sharing one mutable context.
Each step may be skipped by its predicate, and any step can stop the run by
returning a failed or terminal result.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from src.core.utils.logging import log_operation, log_structured

logger = logging.getLogger(__name__)

C = TypeVar("C")


class Visibility(str, Enum):
    """Whether a result reason is shown to end users or only to operators."""

    NORMAL = "normal"
    HIDDEN = "hidden"


class StepResult(BaseModel):
    """Outcome of a single step, and of the pipeline as a whole."""

    model_config = ConfigDict(frozen=True)

    code: int = 0
    reason: str | None = None
    visibility: Visibility = Visibility.NORMAL
    terminal: bool = False

    @classmethod
    def success(cls, reason: str | None = None) -> "StepResult":
        return cls(code=0, reason=reason)

    @classmethod
    def failure(cls, reason: str | None = None) -> "StepResult":
        return cls(code=1, reason=reason)

    def hidden(self) -> "StepResult":
        """Keep the reason out of user-facing output."""
        return self.model_copy(update={"visibility": Visibility.HIDDEN})

    def abort(self) -> "StepResult":
        """Stop the pipeline after this step even though it succeeded."""
        return self.model_copy(update={"terminal": True})

    @property
    def is_success(self) -> bool:
        return self.code == 0

    @property
    def is_visible(self) -> bool:
        return self.visibility == Visibility.NORMAL

    @property
    def stops_pipeline(self) -> bool:
        return self.terminal or self.code != 0


@dataclass(frozen=True)
class Step(Generic[C]):
    """
    A named pipeline operation.

    Attributes:
        name: Human-readable step name used in logs.
        run: Coroutine performing the step against the shared context.
        run_when: Optional predicate; when it returns False the step is skipped.
    """

    name: str
    run: Callable[[C], Awaitable[StepResult]]
    run_when: Callable[[C], Awaitable[bool]] | None = None

    async def should_run(self, context: C) -> bool:
        if self.run_when is None:
            return True
        return await self.run_when(context)


async def run_steps(steps: Sequence[Step[C]], context: C, **log_context: Any) -> StepResult:
    """
    Run steps strictly in order against one context.

    Skipped steps are not reported. The first result that is terminal or
    non-zero ends the run and becomes the final result; otherwise the last
    produced result is returned, or a plain success when no step ran.
    Exceptions raised by a step propagate to the caller unchanged.
    """
    result: StepResult | None = None

    for step in steps:
        if not await step.should_run(context):
            logger.info(f"⏭️ Skipping step '{step.name}'")
            continue

        async with log_operation(f"step:{step.name}", **log_context):
            result = await step.run(context)

        if result.stops_pipeline:
            log_structured(
                logger,
                f"Pipeline stopped at step '{step.name}': {result.reason}",
                level="info" if result.is_success else "warning",
                step=step.name,
                code=result.code,
                visibility=result.visibility.value,
            )
            return result

    return result if result is not None else StepResult.success()
