# parsers/multi_v2.py
import logging
from dataclasses import dataclass
from typing import TextIO

from ingestor.config import StatusConfig
from ingestor.emitter import MetricEmitter

from .base import StatusParser, register
from .errors import FieldCountMismatch, UnrecognizedFormat
from .fields import parse_counter, parse_epoch, split_fields

logger = logging.getLogger(__name__)

TITLE_V2 = "TITLE"

# OpenVPN 2.4 writes 11 data columns plus HEADER and CLIENT_LIST; leave room
# for columns added by later versions. Lines are cut at this many tokens, so a
# header of more than MAX_FIELDS tokens leaves `columns` one short of every
# full data row and the file fails with FieldCountMismatch. Raise the limit
# when the daemon grows past it.
MAX_FIELDS = 20

COLUMN_CNAME = "Common Name"
COLUMN_BYTES_RECV = "Bytes Received"
COLUMN_BYTES_SENT = "Bytes Sent"


@dataclass(frozen=True)
class ColumnIndexMap:
    """Positions of the interesting columns inside a CLIENT_LIST data row."""

    cname: int
    bytes_recv: int
    bytes_sent: int
    columns: int

    @classmethod
    def from_header(cls, fields: list[str]) -> "ColumnIndexMap | None":
        """
        Build the map from a tokenized `HEADER,CLIENT_LIST,...` line.

        A data row starts with CLIENT_LIST where the header has two tokens, so
        every header position is shifted left by one. Returns None when any of
        the three columns is missing.
        """
        found: dict[str, int] = {}
        for i, col in enumerate(fields[2:], start=2):
            if col in (COLUMN_CNAME, COLUMN_BYTES_RECV, COLUMN_BYTES_SENT):
                found[col] = i - 1

        logger.debug(
            "found MULTI v2/v3 HEADER. Column idx: cname: %s, bytes_recv: %s, bytes_sent: %s",
            found.get(COLUMN_CNAME),
            found.get(COLUMN_BYTES_RECV),
            found.get(COLUMN_BYTES_SENT),
        )
        if len(found) != 3:
            return None
        return cls(
            cname=found[COLUMN_CNAME],
            bytes_recv=found[COLUMN_BYTES_RECV],
            bytes_sent=found[COLUMN_BYTES_SENT],
            # data row has one field ("HEADER") less than the header row
            columns=len(fields) - 1,
        )


@register("multi_v2")
class MultiV2Parser(StatusParser):
    """
    Server status file, versions 2 and 3.

    Version 2 is comma delimited, version 3 uses tabs; both carry line type
    tokens and a HEADER line naming the columns, whose set changed between
    daemon releases. Columns are therefore looked up by name.
    """

    def sniff(self, title: str, filename: str) -> float:
        return 1.0 if title.startswith(TITLE_V2) else 0.0

    def parse(
        self, fh: TextIO, name: str, config: StatusConfig, emit: MetricEmitter
    ) -> None:
        index: ColumnIndexMap | None = None
        sum_users = 0

        for line in fh:
            fields = split_fields(line, MAX_FIELDS)

            if index is None:
                if len(fields) >= 3 and fields[0] == "TIME":
                    emit.snapshot_time = parse_epoch(fields[-1]) or emit.snapshot_time
                    continue
                if len(fields) < 2 or fields[0] != "HEADER" or fields[1] != "CLIENT_LIST":
                    continue
                index = ColumnIndexMap.from_header(fields)
                if index is None:
                    break
                continue

            # End of the client section; an empty section is fine.
            if not fields or fields[0] != "CLIENT_LIST":
                break

            if len(fields) != index.columns:
                logger.error(
                    "File format error in instance %s: Fields count mismatch "
                    "(expected %d, got %d).",
                    name,
                    index.columns,
                    len(fields),
                )
                raise FieldCountMismatch(
                    name, f"expected {index.columns} fields, got {len(fields)}"
                )

            logger.debug(
                "found MULTI v2/v3 CLIENT_LIST. Columns: cname: %s, bytes_recv: %s, bytes_sent: %s",
                fields[index.cname],
                fields[index.bytes_recv],
                fields[index.bytes_sent],
            )

            if config.collect_user_count:
                sum_users += 1
            if config.collect_individual_users:
                emit.peer_traffic(
                    name,
                    fields[index.cname],
                    parse_counter(fields[index.bytes_recv]),
                    parse_counter(fields[index.bytes_sent]),
                )

        if index is None:
            logger.warning(
                "Unknown file format in instance %s, please report this as bug. "
                "Make sure to include your status file, so the plugin can be adapted.",
                name,
            )
            raise UnrecognizedFormat(name, "CLIENT_LIST header not found or incomplete")

        if config.collect_user_count:
            emit.users(name, name, sum_users)
