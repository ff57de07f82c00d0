"""
In-process event bus connecting the capture pipeline, the records index and the views
"""

import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

# Event names
FOLDER_RESOLVED = "folder_resolved"
ANALYSIS_COMPLETED = "analysis_completed"
RECORDS_CHANGED = "records_changed"
NAVIGATE = "navigate"


class EventBus:
    """Dispatches named events to sync or async handlers"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.handlers: Dict[str, List[Callable]] = defaultdict(list)

    def subscribe(self, event: str, handler: Callable):
        """Register handler for an event"""
        self.handlers[event].append(handler)
        self.logger.debug(f"Registered handler for event: {event}")

    def unsubscribe(self, event: str, handler: Callable):
        if handler in self.handlers.get(event, []):
            self.handlers[event].remove(handler)

    async def publish(self, event: str, *args: Any):
        """Call every handler of ``event``; one failing handler does not stop the rest"""
        handlers = list(self.handlers.get(event, []))
        if not handlers:
            self.logger.debug(f"No handler for event: {event}")
            return

        for handler in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"Error handling event {event}: {e}", exc_info=True)
