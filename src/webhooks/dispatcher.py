import logging
from typing import Any

from src.core.models import EventType, WebhookEvent
from src.webhooks.handlers.base import EventHandler

logger = logging.getLogger(__name__)


class WebhookDispatcher:
    """
    Routes verified webhook events to the handler registered for their type.
    """

    def __init__(self):
        self._handlers: dict[EventType, EventHandler] = {}

    @property
    def event_types(self) -> list[EventType]:
        return list(self._handlers)

    def register_handler(self, handler: EventHandler) -> None:
        """Register `handler` for the event type it declares, replacing any earlier one."""
        event_type = handler.event_type
        if event_type in self._handlers:
            logger.warning(f"Handler for event type {event_type} is being overridden.")
        self._handlers[event_type] = handler
        logger.info(f"Registered handler for {event_type.name}: {handler.__class__.__name__}")

    async def dispatch(self, event: WebhookEvent) -> dict[str, Any]:
        """
        Hand the event to its handler.

        Handler errors are reported in the result instead of failing the
        delivery, so GitHub does not redeliver an event that was already
        partially handled.
        """
        handler = self._handlers.get(event.event_type)

        if not handler:
            logger.warning(f"No handler registered for event type {event.event_type}. Skipping.")
            return {"status": "skipped", "reason": f"No handler for event type {event.event_type.name}"}

        handler_name = handler.__class__.__name__
        try:
            logger.info(f"Dispatching {event.event_type.name} for {event.repo_full_name} to {handler_name}.")
            response = await handler.handle(event)
        except Exception as e:
            logger.exception(f"Error executing handler for event {event.event_type.name}: {e}")
            return {"status": "error", "reason": str(e)}

        return {"status": "processed", "handler": handler_name, "result": response.model_dump()}


dispatcher = WebhookDispatcher()
