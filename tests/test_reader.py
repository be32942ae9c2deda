import shutil
from pathlib import Path

from ingestor.config import StatusConfig, StatusSource
from ingestor.reader import read_source
from storage.base import MetricSink, SinkError
from storage.memory import MemorySink

FIXTURES = Path(__file__).parent / "fixtures"


def test_read_source_writes_samples(tmp_path: Path):
    path = tmp_path / "client.status"
    shutil.copy(FIXTURES / "single.status", path)

    sink = MemorySink()
    ok = read_source(StatusSource.from_path(str(path)), StatusConfig(), sink)

    assert ok is True
    assert len(sink.samples) == 4
    assert {s.scope for s in sink.samples} == {"client.status"}


def test_missing_file_fails_cycle(tmp_path: Path):
    sink = MemorySink()
    source = StatusSource.from_path(str(tmp_path / "absent.status"))
    assert read_source(source, StatusConfig(), sink) is False
    assert sink.samples == []


def test_empty_file_fails_cycle(tmp_path: Path):
    path = tmp_path / "empty.status"
    path.write_text("")
    sink = MemorySink()
    assert read_source(StatusSource.from_path(str(path)), StatusConfig(), sink) is False
    assert sink.samples == []


def test_mismatch_emits_nothing(tmp_path: Path):
    # the first row is valid, the second is not: no partial cycle reaches the sink
    path = tmp_path / "server.status"
    path.write_text(
        "TITLE,OpenVPN 2.4.7\n"
        "HEADER,CLIENT_LIST,Common Name,Bytes Received,Bytes Sent\n"
        "CLIENT_LIST,alice,100,200\n"
        "CLIENT_LIST,bob,300\n"
    )
    sink = MemorySink()
    assert read_source(StatusSource.from_path(str(path)), StatusConfig(), sink) is False
    assert sink.samples == []


def test_unknown_format_fails_cycle(tmp_path: Path):
    path = tmp_path / "server.status"
    path.write_text("something else entirely\n")
    sink = MemorySink()
    assert read_source(StatusSource.from_path(str(path)), StatusConfig(), sink) is False


def test_sink_failure_fails_cycle(tmp_path: Path):
    class FailingSink(MetricSink):
        def write_batch(self, samples):
            raise SinkError("backend down")

    path = tmp_path / "client.status"
    shutil.copy(FIXTURES / "single.status", path)
    assert read_source(StatusSource.from_path(str(path)), StatusConfig(), FailingSink()) is False
