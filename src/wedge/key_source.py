import logging

logger = logging.getLogger(__name__)


class KeySource:
    """
    Broadcasts raw key events to every registered handler.

    A handler receives a RawKeyEvent and returns True if it consumed the
    event. Consuming does not stop delivery to the remaining handlers.
    """

    def __init__(self):
        self._handlers = []

    def add_handler(self, handler):
        """Registers a handler. Registering twice delivers twice."""
        self._handlers.append(handler)

    def remove_handler(self, handler):
        """Removes one registration of handler; unknown handlers are ignored."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            logger.debug("Handler %r was not registered", handler)

    @property
    def handler_count(self):
        return len(self._handlers)

    def dispatch(self, event):
        """
        Delivers an event to all handlers in registration order.

        Args:
            event (RawKeyEvent): The event to deliver.

        Returns:
            bool: True if any handler reported the event as consumed.
        """
        consumed = False
        # Snapshot so handlers may detach themselves while running.
        for handler in list(self._handlers):
            if handler(event):
                consumed = True
        return consumed
