"""An in-process message channel with deterministic delivery order."""
import inspect
import logging
from collections import defaultdict
from typing import Callable, Dict, List

from .base import MessageAdapter

logger = logging.getLogger(__name__)


class LocalMessageAdapter(MessageAdapter):
    """
    Delivers each message to every consumer of the queue, one after another,
    in the order they subscribed. Coroutine consumers are awaited before the
    next consumer runs.
    """

    def __init__(self):
        super().__init__()
        self._consumers: Dict[str, List[Callable]] = defaultdict(list)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass

    def consume_messages(self, queue_name: str, callback_function: callable = None):
        """Subscribes `callback_function(message)` to `queue_name`."""
        if callback_function is None:
            raise ValueError("callback_function is required for a local queue")
        self._consumers[queue_name].append(callback_function)

    def stop_consuming(self, queue_name: str, callback_function: callable):
        consumers = self._consumers.get(queue_name, [])
        if callback_function in consumers:
            consumers.remove(callback_function)

    def consumers(self, queue_name: str) -> List[Callable]:
        return list(self._consumers.get(queue_name, []))

    async def send_message(self, queue_name: str, message: dict):
        """
        Delivers `message` to the consumers of `queue_name`.

        A failing consumer is logged and does not prevent delivery to the rest.
        """
        for callback in self.consumers(queue_name):
            try:
                result = callback(message)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # pylint: disable=W0718
                logger.exception("Consumer of %s failed for message %s", queue_name, message)
