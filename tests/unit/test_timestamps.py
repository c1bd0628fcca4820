"""Unit tests for the timestamps module."""

from datetime import datetime, timedelta, timezone

from firestore_migrator.services.timestamps import (
    convert_timestamps,
    normalize_timestamp,
    now_iso,
)


class _ProtoTimestamp:
    """Stand-in for a protobuf Timestamp exposing ``ToDatetime()``."""

    def __init__(self, dt):
        self._dt = dt

    def ToDatetime(self):
        return self._dt


class _FirestoreTimestamp:
    """Stand-in for an object exposing ``to_datetime()``."""

    def __init__(self, dt):
        self._dt = dt

    def to_datetime(self):
        return self._dt


class TestNormalizeTimestamp:
    """Tests for normalize_timestamp()."""

    def test_none_stays_none(self):
        assert normalize_timestamp(None) is None

    def test_aware_datetime(self):
        dt = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
        assert normalize_timestamp(dt) == "2024-01-02T03:04:05.123Z"

    def test_naive_datetime_assumed_utc(self):
        assert normalize_timestamp(datetime(2024, 1, 2)) == "2024-01-02T00:00:00.000Z"

    def test_other_timezone_converted_to_utc(self):
        tz = timezone(timedelta(hours=2))
        dt = datetime(2024, 1, 2, 12, 0, tzinfo=tz)
        assert normalize_timestamp(dt) == "2024-01-02T10:00:00.000Z"

    def test_to_datetime_object(self):
        ts = _FirestoreTimestamp(datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc))
        assert normalize_timestamp(ts) == "2023-05-06T07:08:09.000Z"

    def test_protobuf_style_object(self):
        ts = _ProtoTimestamp(datetime(2023, 5, 6, 7, 8, 9))
        assert normalize_timestamp(ts) == "2023-05-06T07:08:09.000Z"

    def test_result_is_parseable_iso(self):
        result = normalize_timestamp(datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc))
        parsed = datetime.fromisoformat(result.replace("Z", "+00:00"))
        assert parsed == datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc)

    def test_primitives_pass_through(self):
        assert normalize_timestamp("2024-01-01") == "2024-01-01"
        assert normalize_timestamp(1700000000) == 1700000000
        assert normalize_timestamp("") == ""
        assert normalize_timestamp(False) is False


class TestConvertTimestamps:
    """Tests for convert_timestamps()."""

    def test_nested_structures(self):
        dt = datetime(2024, 1, 1, tzinfo=timezone.utc)
        data = {
            "paidAt": dt,
            "history": [{"at": dt, "note": "x"}, "plain"],
            "amount": 10,
        }
        assert convert_timestamps(data) == {
            "paidAt": "2024-01-01T00:00:00.000Z",
            "history": [{"at": "2024-01-01T00:00:00.000Z", "note": "x"}, "plain"],
            "amount": 10,
        }

    def test_does_not_mutate_input(self):
        dt = datetime(2024, 1, 1, tzinfo=timezone.utc)
        data = {"at": dt}
        convert_timestamps(data)
        assert data["at"] is dt


def test_now_iso_format():
    result = now_iso()
    assert result.endswith("Z")
    assert len(result) == len("2024-01-01T00:00:00.000Z")
