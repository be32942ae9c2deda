# parsers/fields.py
import re
from datetime import datetime, timezone

from dateutil import parser as dtp
from dateutil import tz

DELIMITERS_RE = re.compile(r"[,\t]+")
COUNTER_RE = re.compile(r"^\s*(\d+)")

U64_MASK = (1 << 64) - 1


def split_fields(line: str, max_fields: int) -> list[str]:
    """
    Split a status line on commas and tabs.

    Runs of delimiters count as one, so empty fields never appear. At most
    `max_fields` tokens are returned; the rest of an over-long line is dropped.
    """
    line = line.rstrip("\r\n")
    return [tok for tok in DELIMITERS_RE.split(line) if tok][:max_fields]


def parse_counter(text: str) -> int:
    """Leading decimal digits of `text` as an unsigned 64-bit value, else 0."""
    m = COUNTER_RE.match(text)
    if not m:
        return 0
    return int(m.group(1)) & U64_MASK


def parse_updated(text: str) -> datetime | None:
    """
    Parse the human readable 'Updated' date written by the daemon.

    The daemon prints it in local time (ctime); naive values get the host zone.
    """
    try:
        ts = dtp.parse(text)
    except (ValueError, OverflowError):
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tz.tzlocal())
    return ts


def parse_epoch(text: str) -> datetime | None:
    m = COUNTER_RE.match(text)
    if not m:
        return None
    try:
        return datetime.fromtimestamp(int(m.group(1)), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
