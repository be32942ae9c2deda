import logging
from typing import TextIO

from parsers import REGISTRY, StatusParser, best_parser
from parsers.errors import EmptyOrUnreadableSource, UnrecognizedFormat

logger = logging.getLogger(__name__)


def sniff_status(fh: TextIO, name: str) -> StatusParser:
    """
    Pick the parser for a status snapshot.
    - Reads exactly one line (the title) from `fh`.
    - Returns a parser instance positioned to consume the rest of the stream.
    """
    try:
        title = fh.readline()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("failed to get data from %s: %s", name, e)
        raise EmptyOrUnreadableSource(name, f"read failed: {e}") from e

    if not title:
        logger.warning("failed to get data from %s", name)
        raise EmptyOrUnreadableSource(name, "status file is empty")

    parser = best_parser(title.rstrip("\r\n"), name)
    if parser is None:
        logger.warning(
            "%s: Unknown file format, please report this as bug. "
            "Make sure to include your status file, so the plugin can be adapted.",
            name,
        )
        raise UnrecognizedFormat(name, f"unknown title line {title.strip()[:64]!r}")

    logger.debug(
        "found status file %s for %s (%d dialects registered)",
        parser.dialect,
        name,
        len(REGISTRY),
    )
    return parser
