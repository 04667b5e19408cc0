"""Unit tests for expiration resolution."""

from datetime import timedelta

import pytest

from redisstore.expiration import (
    DEFAULT,
    FOREVER,
    Expiration,
    resolve,
    to_milliseconds,
    to_timedelta,
)

FIVE_MINUTES = timedelta(minutes=5)


class TestExpiration:
    """Test suite for the Expiration sentinels."""

    def test_module_aliases(self):
        assert DEFAULT is Expiration.DEFAULT
        assert FOREVER is Expiration.FOREVER

    def test_sentinels_are_distinct(self):
        assert DEFAULT is not FOREVER


class TestResolve:
    """Test suite for resolve()."""

    def test_default_uses_configured_default(self):
        assert resolve(DEFAULT, FIVE_MINUTES) == FIVE_MINUTES

    def test_none_behaves_like_default(self):
        assert resolve(None, FIVE_MINUTES) == FIVE_MINUTES

    def test_forever_has_no_ttl(self):
        assert resolve(FOREVER, FIVE_MINUTES) is None

    def test_timedelta_passes_through(self):
        assert resolve(timedelta(seconds=30), FIVE_MINUTES) == timedelta(seconds=30)

    def test_seconds_pass_through(self):
        assert resolve(10, FIVE_MINUTES) == timedelta(seconds=10)
        assert resolve(2.5, FIVE_MINUTES) == timedelta(seconds=2.5)

    def test_zero_is_default(self):
        """Test a literal zero duration resolves like DEFAULT."""
        assert resolve(0, FIVE_MINUTES) == FIVE_MINUTES
        assert resolve(timedelta(0), FIVE_MINUTES) == FIVE_MINUTES

    def test_negative_means_no_expiration(self):
        assert resolve(-1, FIVE_MINUTES) is None
        assert resolve(timedelta(seconds=-5), FIVE_MINUTES) is None

    def test_default_without_configured_default(self):
        assert resolve(DEFAULT, None) is None


class TestConversions:
    """Test suite for the conversion helpers."""

    def test_to_timedelta_rejects_strings(self):
        with pytest.raises(TypeError):
            to_timedelta("5")

    def test_to_timedelta_rejects_bool(self):
        with pytest.raises(TypeError):
            to_timedelta(True)

    def test_to_milliseconds(self):
        assert to_milliseconds(timedelta(seconds=1.5)) == 1500
        assert to_milliseconds(None) is None

    def test_sub_millisecond_rounds_up(self):
        """Test PX never receives 0."""
        assert to_milliseconds(timedelta(microseconds=10)) == 1
