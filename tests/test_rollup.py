"""Tests for unit filtering and daily rollup."""

from datetime import datetime, timedelta, timezone

from cistats.sync.ignore import IgnoreMatcher, compile_patterns
from cistats.sync.models import DailyKey, StatsUnit
from cistats.sync.rollup import build_daily, filter_units

JAN1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN2 = datetime(2024, 1, 2, tzinfo=timezone.utc)


def unit(hour: datetime, tasks, requester: str = "patch") -> StatsUnit:
    return StatsUnit(project_id="p", requester=requester, hour=hour, tasks=tuple(tasks))


class TestFilterUnits:
    """Tests for filter_units."""

    def test_removes_ignored_tasks(self):
        units = [unit(JAN1.replace(hour=10), ["gen_x", "keep_y"])]

        filtered = filter_units(units, compile_patterns(["^gen_"]))

        assert len(filtered) == 1
        assert filtered[0].tasks == ("keep_y",)

    def test_drops_units_left_empty(self):
        units = [
            unit(JAN1.replace(hour=10), ["gen_a", "gen_b"]),
            unit(JAN1.replace(hour=11), ["keep"]),
        ]

        filtered = filter_units(units, compile_patterns(["^gen_"]))

        assert [u.hour.hour for u in filtered] == [11]

    def test_drops_units_with_no_tasks(self):
        filtered = filter_units([unit(JAN1, [])], IgnoreMatcher())

        assert filtered == []

    def test_no_patterns_keeps_units(self):
        units = [unit(JAN1, ["a", "b"])]

        filtered = filter_units(units, IgnoreMatcher())

        assert filtered == units

    def test_does_not_mutate_input(self):
        original = unit(JAN1, ["gen_x", "keep_y"])

        filter_units([original], compile_patterns(["^gen_"]))

        assert original.tasks == ("gen_x", "keep_y")


class TestBuildDaily:
    """Tests for build_daily."""

    def test_same_day_same_requester_concatenates(self):
        """Tasks are concatenated, not deduplicated."""
        units = [
            unit(JAN1.replace(hour=10), ["a"]),
            unit(JAN1.replace(hour=11), ["a", "b"]),
        ]

        daily = build_daily(units)

        assert daily == {DailyKey(JAN1, "patch"): ["a", "a", "b"]}

    def test_splits_by_day(self):
        units = [
            unit(JAN1.replace(hour=23), ["a"]),
            unit(JAN2.replace(hour=0), ["b"]),
        ]

        daily = build_daily(units)

        assert daily[DailyKey(JAN1, "patch")] == ["a"]
        assert daily[DailyKey(JAN2, "patch")] == ["b"]

    def test_splits_by_requester(self):
        units = [
            unit(JAN1.replace(hour=10), ["a"], requester="patch"),
            unit(JAN1.replace(hour=10), ["b"], requester="mainline"),
        ]

        daily = build_daily(units)

        assert daily[DailyKey(JAN1, "patch")] == ["a"]
        assert daily[DailyKey(JAN1, "mainline")] == ["b"]

    def test_keys_are_sorted(self):
        units = [
            unit(JAN2.replace(hour=1), ["x"], requester="patch"),
            unit(JAN1.replace(hour=5), ["y"], requester="patch"),
            unit(JAN1.replace(hour=6), ["z"], requester="mainline"),
        ]

        keys = list(build_daily(units))

        assert keys == [
            DailyKey(JAN1, "mainline"),
            DailyKey(JAN1, "patch"),
            DailyKey(JAN2, "patch"),
        ]

    def test_day_uses_utc_calendar_date(self):
        """An hour given in another offset is bucketed by its UTC day."""
        plus_two = timezone(timedelta(hours=2))
        local_hour = datetime(2024, 1, 2, 1, tzinfo=plus_two)  # 2024-01-01 23:00 UTC

        daily = build_daily([unit(local_hour, ["a"])])

        assert list(daily) == [DailyKey(JAN1, "patch")]
