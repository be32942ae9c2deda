# ingestor/emitter.py
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

PLUGIN = "openvpn"

CATEGORY_TRAFFIC = "traffic"
CATEGORY_COMPRESSION = "compression"
CATEGORY_USERS = "users"


@dataclass(frozen=True)
class MetricSample:
    """
    One emitted value list.

    - category: "traffic", "compression" or "users"
    - scope: primary scope (plugin instance)
    - subscope: secondary scope (type instance), None when unused
    - values: one or two unsigned 64-bit counters
    - time: snapshot time stated by the file, else the read time
    """

    category: str
    scope: str
    subscope: str | None
    values: tuple[int, ...]
    time: datetime | None = None
    plugin: str = PLUGIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "plugin": self.plugin,
            "category": self.category,
            "scope": self.scope,
            "subscope": self.subscope,
            "values": list(self.values),
            "time": self.time.isoformat() if self.time else None,
        }


@dataclass
class MetricEmitter:
    """
    Per-cycle sample buffer.

    Parsers call the submit helpers while they read; the reader hands
    `collect()` to the sink only once the whole file parsed cleanly.
    """

    improved_naming: bool = False
    snapshot_time: datetime | None = None
    _samples: list[MetricSample] = field(default_factory=list)

    def iostats(self, scope: str, subscope: str | None, rx: int, tx: int) -> None:
        self._samples.append(MetricSample(CATEGORY_TRAFFIC, scope, subscope, (rx, tx)))

    def compression(
        self, scope: str, subscope: str | None, uncompressed: int, compressed: int
    ) -> None:
        self._samples.append(
            MetricSample(CATEGORY_COMPRESSION, scope, subscope, (uncompressed, compressed))
        )

    def users(self, scope: str, subscope: str | None, count: int) -> None:
        self._samples.append(MetricSample(CATEGORY_USERS, scope, subscope, (count,)))

    def peer_traffic(self, name: str, peer: str, rx: int, tx: int) -> None:
        """
        Traffic of one connected client.

        Improved naming scopes by instance then peer; legacy naming uses the
        peer as the only scope, as deployments predating multi-instance
        support expect.
        """
        if self.improved_naming:
            self.iostats(name, peer, rx, tx)
        else:
            self.iostats(peer, None, rx, tx)

    def collect(self) -> list[MetricSample]:
        ts = self.snapshot_time or datetime.now(timezone.utc)
        return [replace(s, time=ts) for s in self._samples]

    def __len__(self) -> int:
        return len(self._samples)
