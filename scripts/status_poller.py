import logging
import os
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler

# Watchdog observer selection (polling is more reliable on Docker/Windows bind mounts)
USE_POLLING = os.getenv("WATCH_USE_POLLING", "1").lower() in ("1", "true", "yes")

if USE_POLLING:
    from watchdog.observers.polling import PollingObserver as Observer
    OBSERVER_NAME = "PollingObserver"
else:
    from watchdog.observers import Observer
    OBSERVER_NAME = "Observer"

from ingestor.config import StatusConfig, StatusSource, load_config_from_env
from ingestor.reader import read_source
from storage.base import MetricSink
from storage.factory import get_metric_sink

# -----------------------
# Logging setup
# -----------------------
logger = logging.getLogger(__name__)

# -----------------------
# Config (from env, with sane defaults)
# -----------------------
READ_INTERVAL_SEC = float(os.getenv("READ_INTERVAL_SEC", "10"))
# interval: read every READ_INTERVAL_SEC; change: also read when the daemon rewrites the file
READ_MODE = os.getenv("READ_MODE", "interval").lower()
SINK_TYPE = os.getenv("SINK_TYPE", "sqlite")
DB_PATH = os.getenv("DB_PATH", "openvpn_samples.db")
INGEST_API_URL = os.getenv("INGEST_API_URL", "http://localhost:8000/ingest/batch")


def sink_from_env() -> MetricSink:
    if SINK_TYPE == "http":
        return get_metric_sink("http", url=INGEST_API_URL)
    if SINK_TYPE == "sqlite":
        return get_metric_sink("sqlite", db_path=DB_PATH)
    return get_metric_sink(SINK_TYPE)


# -----------------------
# Poller
# -----------------------
class StatusPoller:
    """Reads every configured status file once per interval."""

    def __init__(
        self,
        sources: list[StatusSource],
        config: StatusConfig,
        sink: MetricSink,
        interval: float = READ_INTERVAL_SEC,
    ):
        self.sources = list(sources)
        self.config = config
        self.sink = sink
        self.interval = interval
        self._stop_evt = threading.Event()
        self._thread: threading.Thread | None = None
        self._observer = None
        # sources are read from the timer thread and the watchdog thread
        self._read_locks = {s.name: threading.Lock() for s in self.sources}

    def read_one(self, source: StatusSource) -> bool:
        with self._read_locks[source.name]:
            return read_source(source, self.config, self.sink)

    def run_once(self) -> dict[str, bool]:
        """Read each source once. Returns source name → success."""
        return {s.name: self.read_one(s) for s in self.sources}

    def _loop(self) -> None:
        while True:
            results = self.run_once()
            failed = [name for name, ok in results.items() if not ok]
            if failed:
                logger.debug("Read failed for %s; retrying next tick", ", ".join(failed))
            if self._stop_evt.wait(self.interval):
                break

    def start(self, watch: bool = False) -> None:
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._loop, name="status-poller", daemon=True)
        self._thread.start()
        if watch:
            self._start_observer()
        logger.info(
            "Polling %d status file(s) every %.1fs (watch=%s)",
            len(self.sources),
            self.interval,
            watch,
        )

    def _start_observer(self) -> None:
        handler = StatusFileEventHandler(self)
        self._observer = Observer()
        for directory in {str(Path(s.path).resolve().parent) for s in self.sources}:
            self._observer.schedule(handler, directory, recursive=False)
        self._observer.start()
        logger.info("Watcher: using %s", OBSERVER_NAME)

    def stop(self) -> None:
        self._stop_evt.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 5)
            self._thread = None


class StatusFileEventHandler(FileSystemEventHandler):
    """Reads a status file as soon as the daemon rewrites it."""

    def __init__(self, poller: StatusPoller):
        self.poller = poller
        self.by_path = {str(Path(s.path).resolve()): s for s in poller.sources}

    def _dispatch_path(self, path: str) -> None:
        source = self.by_path.get(str(Path(path).resolve()))
        if source is not None:
            self.poller.read_one(source)

    def on_modified(self, event) -> None:
        if event.is_directory:
            return
        self._dispatch_path(event.src_path)

    def on_moved(self, event) -> None:
        if event.is_directory:
            return
        # the daemon may write a temp file and rename it over the status file
        self._dispatch_path(getattr(event, "dest_path", event.src_path))


# -----------------------
# Embedding helpers (used by the API lifespan)
# -----------------------
_poller: StatusPoller | None = None


def start_poller(sink: MetricSink | None = None) -> StatusPoller | None:
    """Start a poller from environment settings; None if no status files are configured."""
    global _poller
    config, sources = load_config_from_env()
    if not sources:
        logger.info("No OPENVPN_STATUS_FILES configured; poller not started")
        return None
    _poller = StatusPoller(sources, config, sink or sink_from_env())
    _poller.start(watch=READ_MODE == "change")
    return _poller


def stop_poller() -> None:
    global _poller
    if _poller is not None:
        _poller.stop()
        _poller = None


# -----------------------
# Main
# -----------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config, sources = load_config_from_env()
    if not sources:
        raise SystemExit("OPENVPN_STATUS_FILES is not set")

    sink = sink_from_env()
    logger.info(
        "Config: sources=%s, sink=%s, interval=%ss, mode=%s",
        [s.path for s in sources], SINK_TYPE, READ_INTERVAL_SEC, READ_MODE,
    )
    poller = StatusPoller(sources, config, sink)
    poller.start(watch=READ_MODE == "change")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
        sink.close()
