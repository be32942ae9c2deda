from .http_sink import HTTPSink
from .memory import MemorySink
from .sqlite_backend import SQLiteSink


def get_metric_sink(kind="sqlite", **kwargs):
    if kind == "sqlite":
        return SQLiteSink(**kwargs).connect()
    elif kind == "http":
        return HTTPSink(**kwargs)
    elif kind == "memory":
        return MemorySink()
    else:
        raise ValueError(f"Unsupported sink type: {kind}")
