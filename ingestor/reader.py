# ingestor/reader.py
import logging
from pathlib import Path
from typing import TextIO

from parsers.errors import StatusFormatError
from storage.base import MetricSink, SinkError

from .config import StatusConfig, StatusSource
from .emitter import MetricEmitter, MetricSample
from .sniffer import sniff_status

logger = logging.getLogger(__name__)


def read_status(fh: TextIO, name: str, config: StatusConfig) -> list[MetricSample]:
    """
    Detect the layout of an open status snapshot and parse it.

    Returns the samples of this cycle. Raises StatusFormatError subclasses;
    nothing is returned for a cycle that failed part way through.
    """
    parser = sniff_status(fh, name)
    emit = MetricEmitter(improved_naming=config.improved_naming_schema)
    parser.parse(fh, name, config, emit)
    return emit.collect()


def read_source(source: StatusSource, config: StatusConfig, sink: MetricSink) -> bool:
    """
    Run one read cycle for `source` and write its samples to `sink`.

    Returns False on any failure; the scheduler retries on its next tick.
    """
    path = Path(source.path)
    try:
        # Status files are single-byte delimited text.
        with path.open("r", encoding="ascii", errors="replace") as fh:
            samples = read_status(fh, source.name, config)
    except OSError as e:
        logger.warning("open(%s) failed: %s", source.path, e)
        return False
    except StatusFormatError as e:
        logger.info("read cycle for %s skipped: %s", source.name, e)
        return False

    try:
        sink.write_batch(samples)
    except SinkError as exc:
        logger.error("Sink failed for %s: %s", source.name, exc, exc_info=True)
        return False

    logger.debug("Read %d samples from %s", len(samples), source.path)
    return True
