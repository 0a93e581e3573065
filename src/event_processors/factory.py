from .base import BaseEventProcessor
from .push import PushProcessor


class EventProcessorFactory:
    """Factory for creating event processors."""

    _processors: dict[str, type[BaseEventProcessor]] = {
        "push": PushProcessor,
    }

    @classmethod
    def create_processor(cls, event_type: str) -> BaseEventProcessor:
        """Create a processor for the given event type."""
        processor_class = cls._processors.get(event_type)
        if not processor_class:
            raise ValueError(f"No processor found for event type: {event_type}")

        return processor_class()
