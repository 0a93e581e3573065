from abc import ABC, abstractmethod
from typing import ClassVar

from src.core.models import EventType, WebhookEvent
from src.webhooks.models import WebhookResponse


class EventHandler(ABC):
    """
    Turns a verified webhook delivery into background work.

    Handlers only enqueue; the lint pipeline itself runs in an event processor.
    """

    event_type: ClassVar[EventType]

    @abstractmethod
    async def handle(self, event: WebhookEvent) -> WebhookResponse:
        """Acknowledge the delivery, enqueuing work when there is any."""
