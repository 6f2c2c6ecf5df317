import asyncio
import logging

logger = logging.getLogger(__name__)


class TargetQueue:
    """
    FIFO of work for one sweep. A target name is accepted at most once.
    """

    @property
    def size(self):
        """Return the number of tasks still waiting."""
        return self._queue.qsize()

    def __init__(self):
        self._seen = set()
        self._queue = asyncio.Queue()

    def __contains__(self, name):
        return name in self._seen

    def add_task(self, name, task) -> bool:
        if name in self._seen:
            logger.debug(f"Probe task for target {name} already queued")
            return False
        self._seen.add(name)
        self._queue.put_nowait(task)
        logger.debug(f"Queued probe task for target {name}")
        return True

    def next_task(self):
        """Return the oldest waiting task, or None once the queue is drained."""
        try:
            task = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        self._queue.task_done()
        return task
