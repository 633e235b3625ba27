"""
Tests for timestamp normalization.

Tests cover:
- Every accepted input shape
- Fallback to the default for absent and unparsable input
"""

from datetime import date, datetime, timedelta, timezone

from sprint_metrics.analytics.adapters.timestamps import normalize_date, normalize_timestamp

EXPECTED = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


class _DocumentTimestamp:
    """Stand-in for a document-store timestamp object"""

    def __init__(self, value):
        self._value = value

    def to_datetime(self):
        return self._value


class _BrokenTimestamp:
    def toDate(self):
        raise RuntimeError("boom")


class TestNormalizeTimestamp:
    """Test the accepted timestamp shapes"""

    def test_aware_datetime_is_converted_to_utc(self):
        """Test offset datetimes land in UTC"""
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2025, 3, 10, 11, 0, tzinfo=plus_two)
        assert normalize_timestamp(value) == EXPECTED
        assert normalize_timestamp(value).tzinfo == timezone.utc

    def test_naive_datetime_is_taken_as_utc(self):
        """Test naive datetimes are not shifted"""
        assert normalize_timestamp(datetime(2025, 3, 10, 9, 0)) == EXPECTED

    def test_date_is_midnight_utc(self):
        """Test plain dates become midnight UTC"""
        assert normalize_timestamp(date(2025, 3, 10)) == datetime(2025, 3, 10, tzinfo=timezone.utc)

    def test_iso_strings(self):
        """Test ISO strings with Z, offset and date-only forms"""
        assert normalize_timestamp("2025-03-10T09:00:00Z") == EXPECTED
        assert normalize_timestamp("2025-03-10T10:00:00+01:00") == EXPECTED
        assert normalize_timestamp("2025-03-10") == datetime(2025, 3, 10, tzinfo=timezone.utc)

    def test_epoch_millis(self):
        """Test numeric epoch milliseconds"""
        assert normalize_timestamp(1741597200000) == EXPECTED

    def test_seconds_mapping(self):
        """Test serialized document-store timestamps"""
        assert normalize_timestamp({"seconds": 1741597200, "nanoseconds": 0}) == EXPECTED
        assert normalize_timestamp({"_seconds": 1741597200, "_nanoseconds": 0}) == EXPECTED

    def test_structured_time_object(self):
        """Test objects exposing a conversion method"""
        assert normalize_timestamp(_DocumentTimestamp(datetime(2025, 3, 10, 9, 0))) == EXPECTED

    def test_unparsable_input_returns_default(self):
        """Test garbage never raises"""
        fallback = datetime(2000, 1, 1, tzinfo=timezone.utc)
        assert normalize_timestamp("not a date") is None
        assert normalize_timestamp("not a date", default=fallback) == fallback
        assert normalize_timestamp(None, default=fallback) == fallback
        assert normalize_timestamp(True) is None
        assert normalize_timestamp({"unrelated": 1}) is None
        assert normalize_timestamp(_BrokenTimestamp()) is None
        assert normalize_timestamp(object()) is None


class TestNormalizeDate:
    """Test calendar date normalization"""

    def test_dates_pass_through(self):
        """Test date objects are returned unchanged"""
        assert normalize_date(date(2025, 3, 10)) == date(2025, 3, 10)

    def test_utc_date_of_instants(self):
        """Test the UTC calendar date is used"""
        assert normalize_date("2025-03-10T23:30:00-02:00") == date(2025, 3, 11)

    def test_default(self):
        """Test unparsable values fall back to the default"""
        assert normalize_date("soon", default=date(2025, 1, 1)) == date(2025, 1, 1)
