from src.event_processors.base import BaseEventProcessor
from src.event_processors.factory import EventProcessorFactory
from src.event_processors.push import PushProcessor

__all__ = ["EventProcessorFactory", "BaseEventProcessor", "PushProcessor"]
