from .base import MetricSink as MetricSink
from .base import SinkError as SinkError
from .factory import get_metric_sink as get_metric_sink

__all__ = ["MetricSink", "SinkError", "get_metric_sink"]
