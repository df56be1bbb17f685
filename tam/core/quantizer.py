"""
Turns population segments into a fixed number of dots.

Each segment gets a share of `dot_count` proportional to its count. Every
segment but the last is rounded half-up; the last segment takes whatever is
left, so the dots always add up to exactly `dot_count`. A segment with a
nonzero count is never rounded away while there are dots left to give it.
"""

import logging
import math
from typing import List, Sequence, Tuple

from tam.core.models import Segment

logger = logging.getLogger(__name__)


def allocation_counts(
    segments: Sequence[Segment],
    total_population: int,
    dot_count: int
) -> List[Tuple[Segment, int]]:
    """Number of dots per segment, in input order.

    Args:
        segments: Segments to draw, conventionally largest first.
        total_population: Declared population. Proportions use the segment
            sum instead, so drift between the two does not skew the grid.
        dot_count: Number of dots in the grid.

    Returns:
        (segment, dots) pairs whose dots sum to `dot_count`.
    """
    if dot_count < 0:
        raise ValueError("dot_count cannot be negative")
    if not segments or dot_count == 0:
        return [(segment, 0) for segment in segments]

    total = sum(s.count for s in segments)
    if total == 0:
        return [(segments[0], dot_count)] + [(s, 0) for s in segments[1:]]

    if total != total_population:
        logger.debug(f"Segment sum {total} differs from total population {total_population}")

    # Nonzero segments after index i, each of which is owed one dot
    owed_after = [0] * len(segments)
    for i in range(len(segments) - 2, -1, -1):
        owed_after[i] = owed_after[i + 1] + (1 if segments[i + 1].count > 0 else 0)

    counts = []
    remaining = dot_count
    last = len(segments) - 1

    for i, segment in enumerate(segments):
        if i == last:
            dots = remaining
        else:
            dots = math.floor(segment.count / total * dot_count + 0.5)
            dots = min(dots, max(remaining - owed_after[i], 0))
            if segment.count > 0 and remaining > 0:
                dots = max(dots, 1)

        counts.append((segment, dots))
        remaining -= dots

    return counts


def allocate(
    segments: Sequence[Segment],
    total_population: int,
    dot_count: int
) -> List[Segment]:
    """One segment per dot, in input order, exactly `dot_count` long.

    An empty segment list yields no dots.
    """
    dots = []
    for segment, n in allocation_counts(segments, total_population, dot_count):
        dots.extend([segment] * n)
    return dots


def people_per_dot(total_population: int, dot_count: int) -> float:
    """How many people a single dot stands for."""
    if dot_count <= 0:
        raise ValueError("dot_count must be positive")
    return total_population / dot_count
