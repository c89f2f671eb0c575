"""
Unit tests for the local replica freshness policy.

Tests cover:
- The six hour validity window and its strict boundary
- Forced refresh bypassing the cache
- Human-readable cache ages
"""

from datetime import timedelta

import pytest

from portfolio_client.services.freshness import (
    CACHE_VALIDITY,
    cache_age,
    format_age,
    is_fresh,
    should_use_cache,
)


class TestShouldUseCache:
    """Tests for should_use_cache."""

    def test_validity_window_is_six_hours(self):
        assert CACHE_VALIDITY == timedelta(hours=6)

    def test_never_synced_is_not_usable(self, fixed_now):
        """
        GIVEN no sync has ever happened
        WHEN I ask whether to use the cache
        THEN the answer is no
        """
        assert should_use_cache(None, fixed_now) is False

    def test_recent_sync_is_usable(self, fixed_now):
        """
        GIVEN a sync 5h59m ago
        WHEN I ask whether to use the cache
        THEN the answer is yes
        """
        last_sync = fixed_now - timedelta(hours=5, minutes=59)

        assert should_use_cache(last_sync, fixed_now) is True

    def test_exactly_six_hours_is_stale(self, fixed_now):
        """
        GIVEN a sync exactly six hours ago
        WHEN I ask whether to use the cache
        THEN the answer is no
        """
        last_sync = fixed_now - timedelta(hours=6)

        assert should_use_cache(last_sync, fixed_now) is False

    def test_force_refresh_bypasses_fresh_cache(self, fixed_now):
        """
        GIVEN a sync one minute ago
        WHEN I ask with force_refresh
        THEN the answer is no
        """
        last_sync = fixed_now - timedelta(minutes=1)

        assert should_use_cache(last_sync, fixed_now, force_refresh=True) is False

    def test_custom_validity(self, fixed_now):
        last_sync = fixed_now - timedelta(minutes=30)

        assert is_fresh(last_sync, fixed_now, validity=timedelta(minutes=15)) is False
        assert is_fresh(last_sync, fixed_now, validity=timedelta(hours=1)) is True


class TestCacheAge:
    """Tests for cache_age and format_age."""

    def test_age_of_missing_sync_is_none(self, fixed_now):
        assert cache_age(None, fixed_now) is None

    def test_age_never_negative(self, fixed_now):
        """
        GIVEN a sync stamped slightly in the future (clock skew)
        WHEN I compute its age
        THEN the age is zero
        """
        assert cache_age(fixed_now + timedelta(seconds=5), fixed_now) == timedelta(0)

    @pytest.mark.parametrize(
        "age,expected",
        [
            (None, "never"),
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=45), "45m"),
            (timedelta(hours=2, minutes=5), "2h 5m"),
            (timedelta(hours=6), "6h 0m"),
        ],
    )
    def test_format_age(self, age, expected):
        assert format_age(age) == expected
