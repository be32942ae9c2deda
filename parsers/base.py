# parsers/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from ingestor.config import StatusConfig
    from ingestor.emitter import MetricEmitter


class StatusParser(ABC):
    """One status file layout (dialect)."""

    # Identifier used in logs and in the registry.
    dialect: str = ""

    @abstractmethod
    def sniff(self, title: str, filename: str) -> float:
        """
        Return confidence (0.0–1.0) that this parser handles a file whose
        first line is `title` (line terminator already removed).
        """

    @abstractmethod
    def parse(
        self,
        fh: TextIO,
        name: str,
        config: StatusConfig,
        emit: MetricEmitter,
    ) -> None:
        """
        Consume the rest of `fh` (everything after the title line) and push
        samples into `emit`. Raise a StatusFormatError on structural failure.
        """


# Global dialect registry: maps dialect name → parser class, in registration order
REGISTRY: dict[str, type[StatusParser]] = {}


def register(name: str):
    """Decorator to register a parser class under a dialect name."""

    def decorator(cls):
        cls.dialect = name
        REGISTRY[name.lower()] = cls
        return cls

    return decorator


def best_parser(title: str, filename: str) -> StatusParser | None:
    """
    Run sniff() across all registered parsers and return the highest-confidence
    parser. If all return 0, return None (caller reports UnrecognizedFormat).
    """
    best_score = 0.0
    best: StatusParser | None = None
    for parser_cls in REGISTRY.values():
        parser = parser_cls()
        score = parser.sniff(title, filename)
        if score > best_score:
            best_score, best = score, parser
    return best
