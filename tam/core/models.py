"""Core models for population segments, analysis results and moderation."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"


class ProviderId(StrEnum):
    ANTHROPIC = "anthropic"
    GROQ = "groq"
    OPENAI = "openai"
    GROK = "grok"


class Segment(BaseModel):
    """A named slice of a population with a display color."""
    id: str
    name: str
    count: int = Field(ge=0)
    color: str = Field(pattern=HEX_COLOR_PATTERN)


class SegmentDraft(BaseModel):
    """A segment as returned by a model, before it has an id."""
    name: str = Field(min_length=1)
    count: int = Field(ge=0)
    color: str = Field(pattern=HEX_COLOR_PATTERN)


class SegmentSet(BaseModel):
    """
    Segments plus the population they divide.

    The segment counts are expected to sum to `total_population`, but a
    mismatch is tolerated; use `sum_matches()` to check.
    """
    segments: List[Segment]
    total_population: int = Field(gt=0, alias="totalPopulation")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_unique_ids(self) -> SegmentSet:
        ids = [s.id for s in self.segments]
        if len(ids) != len(set(ids)):
            raise ValueError("Segment ids must be unique")
        return self

    def get_segment(self, segment_id: str) -> Segment:
        """Get a segment by its ID."""
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        raise KeyError(f"Segment {segment_id} not found")

    def segment_sum(self) -> int:
        return sum(s.count for s in self.segments)

    def sum_matches(self) -> bool:
        return self.segment_sum() == self.total_population

    def add_segment(
        self,
        name: str = "New Segment",
        count: int = 0,
        color: Optional[str] = None
    ) -> Segment:
        """Append a segment with a fresh id and the next palette color."""
        from tam.core.formatting import generate_id
        from tam.core.presets import SEGMENT_COLORS

        if color is None:
            color = SEGMENT_COLORS[len(self.segments) % len(SEGMENT_COLORS)]

        existing = {s.id for s in self.segments}
        segment_id = generate_id()
        while segment_id in existing:
            segment_id = generate_id()

        segment = Segment(id=segment_id, name=name, count=count, color=color)
        self.segments.append(segment)
        return segment

    def update_segment(self, segment_id: str, **fields: Any) -> Segment:
        """Replace fields on one segment. The id itself cannot change."""
        if "id" in fields:
            raise ValueError("Segment id cannot be updated")

        for i, segment in enumerate(self.segments):
            if segment.id == segment_id:
                updated = Segment.model_validate({**segment.model_dump(), **fields})
                self.segments[i] = updated
                return updated
        raise KeyError(f"Segment {segment_id} not found")

    def remove_segment(self, segment_id: str) -> bool:
        """Remove a segment. The last remaining segment is never removed."""
        self.get_segment(segment_id)
        if len(self.segments) <= 1:
            return False
        self.segments = [s for s in self.segments if s.id != segment_id]
        return True


class ModerationResult(BaseModel):
    flagged: bool = False
    categories: List[str] = []


class AnalysisResult(BaseModel):
    """Validated segment breakdown returned by a market analysis."""
    total_population: int = Field(gt=0, alias="totalPopulation")
    segments: List[SegmentDraft] = Field(min_length=1)
    provider: ProviderId
    model: str

    model_config = {"populate_by_name": True}

    def segment_sum(self) -> int:
        return sum(s.count for s in self.segments)

    def to_segment_set(self) -> SegmentSet:
        """Assign ids to the drafted segments."""
        from tam.core.formatting import generate_id

        segments = []
        used = set()
        for draft in self.segments:
            segment_id = generate_id()
            while segment_id in used:
                segment_id = generate_id()
            used.add(segment_id)
            segments.append(Segment(id=segment_id, **draft.model_dump()))

        return SegmentSet(segments=segments, total_population=self.total_population)

    def to_response(self) -> dict:
        return {
            "totalPopulation": self.total_population,
            "segments": [s.model_dump() for s in self.segments],
            "provider": self.provider.value,
            "model": self.model,
        }


class PopulationEstimate(BaseModel):
    """A model's estimate of how many of something exist."""
    label: str
    value: int = Field(gt=0)
