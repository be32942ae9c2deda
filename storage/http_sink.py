import logging

import requests

from ingestor.emitter import MetricSample

from .base import MetricSink, SinkError

logger = logging.getLogger(__name__)


class HTTPSink(MetricSink):
    """Posts each batch to the collection API (`POST /ingest/batch`)."""

    def __init__(self, url: str, source: str = "openvpn", timeout: float = 10):
        self.url = url
        self.source = source
        self.timeout = timeout
        self.session = requests.Session()

    def write_batch(self, samples: list[MetricSample]) -> None:
        """Send a batch of samples to the API. Raises SinkError on failure."""
        if not samples:
            return

        payload = {
            "source": self.source,
            "samples": [s.to_dict() for s in samples],
        }
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as rexc:
            logger.warning("Network/API error posting %d samples: %s", len(samples), rexc)
            raise SinkError(str(rexc)) from rexc

    def close(self) -> None:
        self.session.close()
