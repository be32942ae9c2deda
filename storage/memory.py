import threading

from ingestor.emitter import MetricSample

from .base import MetricSink


class MemorySink(MetricSink):
    """Keeps every sample in a list; used for embedding and tests."""

    def __init__(self):
        self.samples: list[MetricSample] = []
        self._lock = threading.Lock()

    def write_batch(self, samples: list[MetricSample]) -> None:
        with self._lock:
            self.samples.extend(samples)

    def clear(self) -> None:
        with self._lock:
            self.samples.clear()
