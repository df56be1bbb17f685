"""Tests for dot allocation."""

from collections import Counter

import pytest

from tam.core.models import Segment
from tam.core.presets import DEFAULT_TAM_DATA
from tam.core.quantizer import allocate, allocation_counts, people_per_dot


def make_segments(*counts):
    """Segments s0, s1, ... with the given counts."""
    return [
        Segment(id=f"s{i}", name=f"Segment {i}", count=count, color="#6b7280")
        for i, count in enumerate(counts)
    ]


def dots_per_segment(dots):
    return Counter(s.id for s in dots)


def test_remainder_split_exact():
    """700/300 over 10 dots splits 7/3."""
    segments = make_segments(700, 300)

    dots = allocate(segments, 1000, 10)

    assert len(dots) == 10
    assert dots_per_segment(dots) == {"s0": 7, "s1": 3}


def test_dots_keep_input_order():
    segments = make_segments(700, 300)

    dots = allocate(segments, 1000, 10)

    assert [s.id for s in dots] == ["s0"] * 7 + ["s1"] * 3


def test_single_segment_gets_all_dots():
    segments = make_segments(42)

    dots = allocate(segments, 42, 25)

    assert len(dots) == 25
    assert all(s.id == "s0" for s in dots)


@pytest.mark.parametrize("counts,dot_count", [
    ((6_800_000_000, 1_300_000_000, 20_000_000, 3_500_000), 2500),
    ((1, 1, 1), 3),
    ((333, 333, 334), 10),
    ((999, 1, 1), 3),
    ((5, 5, 5, 5, 5, 5, 5), 8),
    ((1, 2, 3, 4, 5, 6, 7, 8, 9, 10), 100),
    ((10, 0, 10), 7),
])
def test_dot_total_is_exact(counts, dot_count):
    segments = make_segments(*counts)

    dots = allocate(segments, sum(counts), dot_count)

    assert len(dots) == dot_count


@pytest.mark.parametrize("counts,dot_count", [
    ((999, 1, 1), 3),
    ((1_000_000_000, 1, 1, 1), 10),
    ((6_800_000_000, 1_300_000_000, 20_000_000, 3_500_000), 2500),
    ((1, 10_000, 1), 5),
])
def test_nonzero_segments_always_visible(counts, dot_count):
    segments = make_segments(*counts)

    per_segment = dots_per_segment(allocate(segments, sum(counts), dot_count))

    for segment in segments:
        assert per_segment[segment.id] >= 1


def test_zero_count_segment_gets_no_dots():
    segments = make_segments(500, 0, 500)

    counts = dict((s.id, n) for s, n in allocation_counts(segments, 1000, 10))

    assert counts["s1"] == 0
    assert counts["s0"] + counts["s2"] == 10


def test_last_segment_takes_rounding_slack():
    """Three equal thirds of 10: first two round to 3, last absorbs 4."""
    segments = make_segments(1, 1, 1)

    counts = [n for _, n in allocation_counts(segments, 3, 10)]

    assert counts == [3, 3, 4]


def test_rounding_is_half_up():
    """2.5 dots round up to 3, not to the even 2."""
    segments = make_segments(1, 3)

    counts = [n for _, n in allocation_counts(segments, 4, 10)]

    assert counts == [3, 7]


def test_proportions_use_segment_sum_not_declared_total():
    segments = make_segments(700, 300)

    dots = allocate(segments, 5_000, 10)

    assert dots_per_segment(dots) == {"s0": 7, "s1": 3}


def test_fewer_dots_than_segments_never_overshoots():
    segments = make_segments(10, 10, 10, 10)

    dots = allocate(segments, 40, 2)

    assert len(dots) == 2


def test_empty_segments():
    assert allocate([], 0, 100) == []


def test_zero_total_fills_with_first_segment():
    segments = make_segments(0, 0)

    dots = allocate(segments, 0, 5)

    assert len(dots) == 5
    assert all(s.id == "s0" for s in dots)


def test_zero_dot_count():
    segments = make_segments(700, 300)

    assert allocate(segments, 1000, 0) == []


def test_negative_dot_count():
    with pytest.raises(ValueError, match="cannot be negative"):
        allocate(make_segments(1), 1, -1)


def test_default_data_allocation():
    segment_set = DEFAULT_TAM_DATA.segment_set

    counts = allocation_counts(segment_set.segments, segment_set.total_population, DEFAULT_TAM_DATA.dot_count)

    assert sum(n for _, n in counts) == 2500
    assert [n for _, n in counts][0] > 2000
    assert all(n >= 1 for _, n in counts)


def test_people_per_dot():
    assert people_per_dot(8_100_000_000, 2500) == 3_240_000

    with pytest.raises(ValueError, match="must be positive"):
        people_per_dot(100, 0)


def test_later_nonzero_segments_keep_a_dot():
    """90/5/5 over 10 dots: the first segment gives up a dot so the last is still drawn."""
    segments = make_segments(90, 5, 5)

    counts = [n for _, n in allocation_counts(segments, 100, 10)]

    assert counts == [8, 1, 1]
