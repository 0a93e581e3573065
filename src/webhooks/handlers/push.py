import logging

from src.core.models import EventType, WebhookEvent
from src.tasks.task_queue import task_queue
from src.webhooks.handlers.base import EventHandler
from src.webhooks.models import WebhookResponse

logger = logging.getLogger(__name__)


class PushEventHandler(EventHandler):
    """Enqueues one lint run per pushed commit."""

    event_type = EventType.PUSH

    async def handle(self, event: WebhookEvent) -> WebhookResponse:
        """Handle push events by enqueuing them for background processing."""
        if not event.installation_id:
            logger.warning(f"Push event for {event.repo_full_name} has no installation, ignoring")
            return WebhookResponse(status="ignored", detail="Missing installation", event_type="push")

        logger.info(f"🔄 Enqueuing push event for {event.repo_full_name}")

        task_id = await task_queue.enqueue(
            event_type="push",
            repo_full_name=event.repo_full_name,
            installation_id=event.installation_id,
            payload=event.payload,
        )

        if task_id is None:
            return WebhookResponse(status="ignored", detail="Duplicate delivery", event_type="push")

        logger.info(f"✅ Push event enqueued with task ID: {task_id}")
        return WebhookResponse(status="enqueued", event_type="push", task_id=task_id)
