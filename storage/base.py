from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestor.emitter import MetricSample


class SinkError(Exception):
    """A sink could not accept a batch of samples."""


class MetricSink(ABC):
    """Destination for the samples of a read cycle."""

    @abstractmethod
    def write_batch(self, samples: "list[MetricSample]") -> None:
        """Accept a batch of samples. Raise SinkError on failure."""

    def close(self) -> None:
        """Release resources held by the sink."""
