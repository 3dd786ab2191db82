import asyncio
import logging
from typing import List

logger = logging.getLogger(__name__)


class Broadcaster:
    """In-memory fan-out of serialized envelopes to every attached SSE stream.

    Every subscriber sees every message. Each subscriber has its own bounded
    buffer; when a slow reader lets it fill up, the oldest buffered message is
    discarded to make room, since this is a live channel and not a queue with
    delivery guarantees.
    """

    def __init__(self, capacity: int = 100):
        self.capacity = capacity
        self.subscribers: List[asyncio.Queue] = []
        self.lock = asyncio.Lock()
        self.dropped = 0

    @property
    def subscriber_count(self) -> int:
        return len(self.subscribers)

    async def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.capacity)
        async with self.lock:
            self.subscribers.append(queue)
        logger.info("SSE subscriber attached (%d active)", self.subscriber_count)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        async with self.lock:
            if queue in self.subscribers:
                self.subscribers.remove(queue)
        logger.info("SSE subscriber detached (%d active)", self.subscriber_count)

    async def publish(self, message: str) -> int:
        """Hand ``message`` to all current subscribers.

        Returns how many subscribers received it; 0 means nobody is listening.
        """
        async with self.lock:
            queues = list(self.subscribers)
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                self.dropped += 1
            queue.put_nowait(message)
        return len(queues)
