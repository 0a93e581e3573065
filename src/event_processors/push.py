import logging
import tempfile
import time
from pathlib import Path

from src.core.config import config
from src.core.models import PushEvent
from src.event_processors.base import BaseEventProcessor, ProcessingResult, ProcessingState
from src.lint.context import LintContext
from src.lint.steps import LINT_STEPS
from src.pipeline.steps import StepResult, run_steps
from src.tasks.task_queue import Task

logger = logging.getLogger(__name__)


class PushProcessor(BaseEventProcessor):
    """Processor for push events: lints the pushed commit and persists fixes."""

    def __init__(self):
        super().__init__()
        self.steps = LINT_STEPS

    def get_event_type(self) -> str:
        return "push"

    async def process(self, task: Task) -> ProcessingResult:
        """Run the lint pipeline for one push in its own temporary working directory."""
        start_time = time.time()
        event = PushEvent.from_payload(task.payload)

        logger.info("=" * 80)
        logger.info(f"🚀 Processing PUSH event for {task.repo_full_name}")
        logger.info(f"   Branch: {event.branch}")
        logger.info(f"   Commit: {event.short_sha}")
        logger.info("=" * 80)

        if event.is_deletion:
            result = StepResult.success("Ignore branch deletion").hidden().abort()
        elif not event.is_branch:
            result = StepResult.success("Ignore non-branch ref").hidden().abort()
        else:
            with tempfile.TemporaryDirectory(prefix="lintflow-") as directory:
                context = LintContext(
                    event=event,
                    installation_id=task.installation_id,
                    github_client=self.github_client,
                    directory=Path(directory),
                    settings=config.lint,
                    git_settings=config.git,
                )
                result = await run_steps(self.steps, context, repo=event.full_name, sha=event.short_sha)

        processing_time = int((time.time() - start_time) * 1000)

        logger.info("=" * 80)
        logger.info(f"🏁 PUSH processing completed in {processing_time}ms")
        if result.is_visible:
            logger.info(f"   Result: {result.reason}")
        else:
            # hidden results never reach users, operators still see them here
            logger.info(f"   Result (hidden): {result.reason}")
        logger.info("=" * 80)

        return ProcessingResult(
            state=ProcessingState.PASS if result.is_success else ProcessingState.FAIL,
            reason=result.reason,
            visible=result.is_visible,
            processing_time_ms=processing_time,
        )
