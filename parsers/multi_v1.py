# parsers/multi_v1.py
import logging
from typing import TextIO

from ingestor.config import StatusConfig
from ingestor.emitter import MetricEmitter

from .base import StatusParser, register
from .errors import UnrecognizedFormat
from .fields import parse_counter, parse_updated, split_fields

logger = logging.getLogger(__name__)

TITLE_V1 = "OpenVPN CLIENT LIST"
V1_HEADER = "Common Name,Real Address,Bytes Received,Bytes Sent,Connected Since"
V1_END = "ROUTING TABLE"

MAX_FIELDS = 10

# Fixed column positions in a client row
COL_CNAME = 0
COL_BYTES_RECV = 2
COL_BYTES_SENT = 3


@register("multi_v1")
class MultiV1Parser(StatusParser):
    """
    Server status file, version 1: comma delimited, no line type tokens.

        OpenVPN CLIENT LIST
        Updated,Thu Jan  1 12:00:00 2026
        Common Name,Real Address,Bytes Received,Bytes Sent,Connected Since
        alice,1.2.3.4:1194,100,200,Thu Jan  1 11:00:00 2026
        ROUTING TABLE
        ...
    """

    def sniff(self, title: str, filename: str) -> float:
        return 1.0 if title == TITLE_V1 else 0.0

    def parse(
        self, fh: TextIO, name: str, config: StatusConfig, emit: MetricEmitter
    ) -> None:
        found_header = False
        sum_users = 0

        for raw in fh:
            line = raw.rstrip("\r\n")
            # no client data after the routing table
            if line == V1_END:
                break

            if line == V1_HEADER:
                found_header = True
                continue

            fields = split_fields(line, MAX_FIELDS)
            if not found_header:
                # preamble
                if len(fields) == 2 and fields[0] == "Updated":
                    emit.snapshot_time = parse_updated(fields[1]) or emit.snapshot_time
                continue

            if len(fields) < 4:
                continue

            if config.collect_user_count:
                sum_users += 1
            if config.collect_individual_users:
                emit.peer_traffic(
                    name,
                    fields[COL_CNAME],
                    parse_counter(fields[COL_BYTES_RECV]),
                    parse_counter(fields[COL_BYTES_SENT]),
                )

        if not found_header:
            logger.warning(
                "Unknown file format in instance %s, please report this as bug. "
                "Make sure to include your status file, so the plugin can be adapted.",
                name,
            )
            raise UnrecognizedFormat(name, "client list header not found")

        if config.collect_user_count:
            emit.users(name, name, sum_users)
