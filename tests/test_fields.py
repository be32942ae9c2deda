import time
from datetime import datetime, timezone

import pytest

from parsers.fields import parse_counter, parse_epoch, parse_updated, split_fields


def test_split_fields_commas_and_tabs():
    assert split_fields("a,b\tc\n", 10) == ["a", "b", "c"]


def test_split_fields_skips_delimiter_runs():
    # consecutive delimiters never yield empty fields
    assert split_fields("a,,b\t\t,c", 10) == ["a", "b", "c"]
    assert split_fields(",,a,", 10) == ["a"]


def test_split_fields_caps_at_capacity():
    assert split_fields("1,2,3,4,5,6", 4) == ["1", "2", "3", "4"]


def test_split_fields_blank_line():
    assert split_fields("\n", 4) == []
    assert split_fields(",\t,", 4) == []


def test_split_fields_keeps_spaces_inside_fields():
    assert split_fields("TUN/TAP read bytes,3000\r\n", 4) == ["TUN/TAP read bytes", "3000"]


def test_parse_counter():
    assert parse_counter("12345") == 12345
    assert parse_counter("  42") == 42
    assert parse_counter("123abc") == 123  # truncated trailing garbage
    assert parse_counter("abc") == 0
    assert parse_counter("") == 0
    assert parse_counter("-5") == 0


def test_parse_counter_wraps_to_u64():
    assert parse_counter(str(2**64 + 7)) == 7


@pytest.fixture
def berlin_time(monkeypatch):
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_parse_updated_is_local_time(berlin_time):
    # 13:00 in Berlin and epoch 1767268800 are the same instant
    ts = parse_updated("Thu Jan  1 13:00:00 2026")
    assert ts == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ts == parse_epoch("1767268800")


def test_parse_updated_keeps_explicit_zone():
    ts = parse_updated("Thu Jan  1 12:00:00 UTC 2026")
    assert ts == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_updated_rejects_garbage():
    assert parse_updated("not a date at all") is None


def test_parse_epoch():
    assert parse_epoch("1767268800") == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_epoch("soon") is None
