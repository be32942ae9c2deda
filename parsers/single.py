# parsers/single.py
import logging
from typing import TextIO

from ingestor.config import StatusConfig
from ingestor.emitter import MetricEmitter

from .base import StatusParser, register
from .fields import U64_MASK, parse_counter, parse_updated, split_fields

logger = logging.getLogger(__name__)

TITLE_SINGLE = "OpenVPN STATISTICS"

# Status lines are "label,value"; anything else is a section boundary.
MAX_FIELDS = 4

LABELS = {
    # read from the system and sent over the tunnel
    "TUN/TAP read bytes": "tun_tx",
    # read from the tunnel and written to the system
    "TUN/TAP write bytes": "tun_rx",
    "TCP/UDP read bytes": "link_rx",
    "TCP/UDP write bytes": "link_tx",
    "pre-compress bytes": "pre_compress",
    "post-compress bytes": "post_compress",
    "pre-decompress bytes": "pre_decompress",
    "post-decompress bytes": "post_decompress",
}


def tunnel_overhead(link: int, removed: int, added: int, tunnel: int) -> int:
    """
    Encapsulation overhead as ((link - removed) + added) - tunnel.

    All operands are unsigned 64-bit counters. The grouping is fixed: the
    compression correction is applied to the link counter before the tunnel
    payload is subtracted, so consistent inputs never pass through a negative
    intermediate. Each step wraps modulo 2**64 like the daemon's counters.
    """
    value = (link - removed) & U64_MASK
    value = (value + added) & U64_MASK
    value = (value - tunnel) & U64_MASK
    return value


@register("single")
class SingleParser(StatusParser):
    """Point-to-point / client mode statistics file."""

    def sniff(self, title: str, filename: str) -> float:
        return 1.0 if title == TITLE_SINGLE else 0.0

    def parse(
        self, fh: TextIO, name: str, config: StatusConfig, emit: MetricEmitter
    ) -> None:
        counters = dict.fromkeys(LABELS.values(), 0)

        for line in fh:
            fields = split_fields(line, MAX_FIELDS)
            if len(fields) != 2:
                continue
            label, value = fields
            key = LABELS.get(label)
            if key is not None:
                counters[key] = parse_counter(value)
            elif label == "Updated":
                emit.snapshot_time = parse_updated(value) or emit.snapshot_time

        link_rx, link_tx = counters["link_rx"], counters["link_tx"]
        emit.iostats(name, "traffic", link_rx, link_tx)

        overhead_rx = tunnel_overhead(
            link_rx, counters["pre_decompress"], counters["post_decompress"], counters["tun_rx"]
        )
        overhead_tx = tunnel_overhead(
            link_tx, counters["post_compress"], counters["pre_compress"], counters["tun_tx"]
        )
        emit.iostats(name, "overhead", overhead_rx, overhead_tx)

        if config.collect_compression:
            emit.compression(
                name, "data_in", counters["post_decompress"], counters["pre_decompress"]
            )
            emit.compression(
                name, "data_out", counters["pre_compress"], counters["post_compress"]
            )
