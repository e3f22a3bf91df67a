"""
Fetched-job sink.

Ordered, thread-safe buffer of jobs emitted by the scan loop and read by
the downstream scheduler.
"""

import threading
from collections import deque
from typing import List

from .models import JobDescriptor


class FetchedJobSink:
    """
    FIFO buffer of emitted job descriptors.

    Only the scan loop appends. Consumers read with all() or take
    ownership with drain().
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._jobs: deque[JobDescriptor] = deque()

    def append(self, job: JobDescriptor) -> None:
        with self._lock:
            self._jobs.append(job)

    def all(self) -> List[JobDescriptor]:
        """Copy of the buffered jobs in emission order (non-destructive)."""
        with self._lock:
            return list(self._jobs)

    def drain(self) -> List[JobDescriptor]:
        """Atomically return all buffered jobs and empty the buffer."""
        with self._lock:
            jobs = list(self._jobs)
            self._jobs.clear()
        return jobs

    def clear(self) -> None:
        """
        Discard all buffered jobs.

        Used primarily for testing or when resetting trigger state.
        """
        with self._lock:
            self._jobs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
