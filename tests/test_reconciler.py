import itertools
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from coverage_intervals.exceptions import InvalidWindow, UnparsableInstant
from coverage_intervals.models import CoveragePeriod, ReportWindow
from coverage_intervals.reconciler import IntervalReconciler, build_intervals
from coverage_intervals.time_utils import format_iso


def iso(text: str) -> datetime:
    return datetime.fromisoformat(text)


def pairs(intervals):
    return [(format_iso(iv.begin), format_iso(iv.end)) for iv in intervals]


def assert_partitions(intervals, window):
    assert intervals[0].begin == window.begin
    assert intervals[-1].end == window.end
    for current, following in zip(intervals, intervals[1:]):
        assert current.end == following.begin
    for iv in intervals:
        assert iv.duration > timedelta(0)


JANUARY = ReportWindow(
    begin=iso("2022-01-01T00:00:00+01:00"),
    end=iso("2022-02-01T00:00:00+01:00"),
)


def test_no_periods_gives_the_whole_window(warsaw):
    window = ReportWindow(
        begin=iso("2022-06-15T00:00:00+02:00"),
        end=iso("2023-04-30T00:00:00+02:00"),
    )

    intervals = build_intervals(window, [], warsaw)

    assert pairs(intervals) == [("2022-06-15T00:00:00+02:00", "2023-04-30T00:00:00+02:00")]


def test_closed_period_splits_window_in_three(warsaw):
    period = CoveragePeriod(
        begin=iso("2022-01-10T00:00:00+01:00"),
        end=iso("2022-01-20T00:00:00+01:00"),
    )

    intervals = build_intervals(JANUARY, [period], warsaw)

    assert pairs(intervals) == [
        ("2022-01-01T00:00:00+01:00", "2022-01-10T00:00:00+01:00"),
        ("2022-01-10T00:00:00+01:00", "2022-01-20T00:00:00+01:00"),
        ("2022-01-20T00:00:00+01:00", "2022-02-01T00:00:00+01:00"),
    ]
    assert_partitions(intervals, JANUARY)


def test_open_ended_period_is_clipped_at_window_end(warsaw):
    period = CoveragePeriod(begin=iso("2022-01-15T00:00:00+01:00"), end=None)

    intervals = build_intervals(JANUARY, [period], warsaw)

    assert pairs(intervals) == [
        ("2022-01-01T00:00:00+01:00", "2022-01-15T00:00:00+01:00"),
        ("2022-01-15T00:00:00+01:00", "2022-02-01T00:00:00+01:00"),
    ]
    assert intervals[-1].end == JANUARY.end


def test_open_ended_period_starting_before_window_adds_nothing(warsaw):
    period = CoveragePeriod(begin=iso("2021-03-01T00:00:00+01:00"), end=None)

    intervals = build_intervals(JANUARY, [period], warsaw)

    assert pairs(intervals) == [("2022-01-01T00:00:00+01:00", "2022-02-01T00:00:00+01:00")]


@pytest.mark.parametrize(
    "period",
    [
        CoveragePeriod(iso("2021-11-01T00:00:00+01:00"), iso("2021-12-01T00:00:00+01:00")),
        CoveragePeriod(iso("2021-12-01T00:00:00+01:00"), iso("2022-01-01T00:00:00+01:00")),
        CoveragePeriod(iso("2022-02-01T00:00:00+01:00"), iso("2022-03-01T00:00:00+01:00")),
        CoveragePeriod(iso("2022-02-01T00:00:00+01:00"), None),
        CoveragePeriod(iso("2022-05-01T00:00:00+02:00"), None),
    ],
)
def test_period_outside_window_is_ignored(warsaw, period):
    intervals = build_intervals(JANUARY, [period], warsaw)

    assert intervals == build_intervals(JANUARY, [], warsaw)


def test_period_overhanging_both_edges_is_clipped(warsaw):
    period = CoveragePeriod(
        begin=iso("2021-12-01T00:00:00+01:00"),
        end=iso("2022-03-01T00:00:00+01:00"),
    )

    intervals = build_intervals(JANUARY, [period], warsaw)

    assert pairs(intervals) == [("2022-01-01T00:00:00+01:00", "2022-02-01T00:00:00+01:00")]


def test_shared_boundary_appears_once(warsaw):
    first = CoveragePeriod(iso("2022-01-05T00:00:00+01:00"), iso("2022-01-12T00:00:00+01:00"))
    second = CoveragePeriod(iso("2022-01-12T00:00:00+01:00"), iso("2022-01-25T00:00:00+01:00"))

    intervals = build_intervals(JANUARY, [first, second], warsaw)

    assert pairs(intervals) == [
        ("2022-01-01T00:00:00+01:00", "2022-01-05T00:00:00+01:00"),
        ("2022-01-05T00:00:00+01:00", "2022-01-12T00:00:00+01:00"),
        ("2022-01-12T00:00:00+01:00", "2022-01-25T00:00:00+01:00"),
        ("2022-01-25T00:00:00+01:00", "2022-02-01T00:00:00+01:00"),
    ]


def test_equal_instants_with_different_offsets_collapse(warsaw):
    local = CoveragePeriod(iso("2022-01-10T00:00:00+01:00"), iso("2022-01-20T00:00:00+01:00"))
    utc = CoveragePeriod(iso("2022-01-09T23:00:00+00:00"), None)

    intervals = build_intervals(JANUARY, [local, utc], warsaw)

    assert pairs(intervals) == [
        ("2022-01-01T00:00:00+01:00", "2022-01-10T00:00:00+01:00"),
        ("2022-01-10T00:00:00+01:00", "2022-01-20T00:00:00+01:00"),
        ("2022-01-20T00:00:00+01:00", "2022-02-01T00:00:00+01:00"),
    ]


@pytest.mark.parametrize(
    "end",
    ["2022-01-10T00:00:00+01:00", "2022-01-05T00:00:00+01:00", "2022-01-09T23:00:00+01:00"],
)
def test_degenerate_period_contributes_no_boundaries(warsaw, end):
    period = CoveragePeriod(begin=iso("2022-01-10T00:00:00+01:00"), end=iso(end))

    assert period.is_degenerate
    assert pairs(build_intervals(JANUARY, [period], warsaw)) == [
        ("2022-01-01T00:00:00+01:00", "2022-02-01T00:00:00+01:00")
    ]


def test_input_offsets_are_normalized_to_reference_zone(warsaw):
    window = ReportWindow(
        begin=iso("2022-01-01T00:00:00+00:00"),
        end=iso("2022-01-02T00:00:00-05:00"),
    )
    period = CoveragePeriod(iso("2022-01-01T12:00:00+09:00"), None)

    intervals = build_intervals(window, [period], warsaw)

    assert pairs(intervals) == [
        ("2022-01-01T01:00:00+01:00", "2022-01-01T04:00:00+01:00"),
        ("2022-01-01T04:00:00+01:00", "2022-01-02T06:00:00+01:00"),
    ]


def test_window_across_dst_change_keeps_both_offsets(warsaw):
    window = ReportWindow(
        begin=iso("2022-03-01T00:00:00+01:00"),
        end=iso("2022-04-01T00:00:00+02:00"),
    )
    period = CoveragePeriod(iso("2022-03-27T03:00:00+02:00"), None)

    intervals = build_intervals(window, [period], warsaw)

    assert pairs(intervals) == [
        ("2022-03-01T00:00:00+01:00", "2022-03-27T03:00:00+02:00"),
        ("2022-03-27T03:00:00+02:00", "2022-04-01T00:00:00+02:00"),
    ]


def test_repeated_fall_back_hour_is_not_merged(warsaw):
    window = ReportWindow(
        begin=iso("2022-10-29T00:00:00+02:00"),
        end=iso("2022-10-31T00:00:00+01:00"),
    )
    # Starts and ends at 02:30 local time, one hour apart in absolute time
    period = CoveragePeriod(iso("2022-10-30T00:30:00+00:00"), iso("2022-10-30T01:30:00+00:00"))

    intervals = build_intervals(window, [period], warsaw)

    assert pairs(intervals) == [
        ("2022-10-29T00:00:00+02:00", "2022-10-30T02:30:00+02:00"),
        ("2022-10-30T02:30:00+02:00", "2022-10-30T02:30:00+01:00"),
        ("2022-10-30T02:30:00+01:00", "2022-10-31T00:00:00+01:00"),
    ]
    assert intervals[1].duration == timedelta(hours=1)


def test_result_is_independent_of_period_order(warsaw):
    periods = [
        CoveragePeriod(iso("2022-01-03T00:00:00+01:00"), iso("2022-01-09T00:00:00+01:00")),
        CoveragePeriod(iso("2022-01-07T00:00:00+01:00"), None),
        CoveragePeriod(iso("2021-12-20T00:00:00+01:00"), iso("2022-01-04T12:00:00+01:00")),
        CoveragePeriod(iso("2022-01-15T00:00:00+01:00"), iso("2022-01-15T00:00:00+01:00")),
        CoveragePeriod(iso("2022-01-28T00:00:00+01:00"), iso("2022-03-01T00:00:00+01:00")),
    ]

    expected = build_intervals(JANUARY, periods, warsaw)
    for permutation in itertools.permutations(periods):
        assert build_intervals(JANUARY, list(permutation), warsaw) == expected

    assert_partitions(expected, JANUARY)
    assert len(expected) == 6


def test_accepts_any_iterable_of_periods(warsaw):
    periods = (
        CoveragePeriod(iso("2022-01-10T00:00:00+01:00"), None) for _ in range(3)
    )

    assert len(build_intervals(JANUARY, periods, warsaw)) == 2


@pytest.mark.parametrize(
    "begin, end",
    [
        ("2022-01-01T00:00:00+01:00", "2022-01-01T00:00:00+01:00"),
        ("2022-01-01T00:00:00+01:00", "2021-12-31T23:00:00+00:00"),
        ("2022-02-01T00:00:00+01:00", "2022-01-01T00:00:00+01:00"),
    ],
)
def test_invalid_window_fails(warsaw, begin, end):
    window = ReportWindow(begin=iso(begin), end=iso(end))

    with pytest.raises(InvalidWindow):
        build_intervals(window, [CoveragePeriod(iso("2022-01-10T00:00:00+01:00"))], warsaw)


def test_naive_period_instant_fails_whole_call(warsaw):
    periods = [
        CoveragePeriod(iso("2022-01-10T00:00:00+01:00"), None),
        CoveragePeriod(datetime(2022, 1, 12), None),
    ]

    with pytest.raises(UnparsableInstant):
        build_intervals(JANUARY, periods, warsaw)


def test_reconciler_honours_its_zone():
    reconciler = IntervalReconciler(ZoneInfo("UTC"))

    intervals = reconciler.build(
        JANUARY,
        [CoveragePeriod(iso("2022-01-10T00:00:00+01:00"), None)],
    )

    assert pairs(intervals) == [
        ("2021-12-31T23:00:00+00:00", "2022-01-09T23:00:00+00:00"),
        ("2022-01-09T23:00:00+00:00", "2022-01-31T23:00:00+00:00"),
    ]
    assert intervals[0].begin.tzinfo is reconciler.zone


def test_default_zone_is_used_when_none_given():
    intervals = build_intervals(JANUARY, [])

    assert intervals[0].begin.utcoffset() == timedelta(hours=1)
    assert intervals[0].begin == datetime(2021, 12, 31, 23, tzinfo=timezone.utc)
