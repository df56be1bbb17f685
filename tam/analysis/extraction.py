"""
Pulls JSON objects out of free-text model output and validates them.

Models wrap their JSON in prose or code fences often enough that the text
cannot be parsed whole. The scanner walks the text tracking brace depth and
string/escape state, so braces inside strings never end an object early and
trailing prose or a second object is never swallowed.
"""

import json
import logging
from typing import Any, Dict, Iterator, Optional

from pydantic import ValidationError

from tam.analysis.errors import MalformedSegmentData, UnparsableResponse
from tam.core.models import AnalysisResult, PopulationEstimate, ProviderId

logger = logging.getLogger(__name__)


def _object_end(text: str, start: int) -> Optional[int]:
    """Index just past the `}` closing the object opened at `start`, or None."""
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def iter_json_objects(text: str, nested: bool = True) -> Iterator[Dict[str, Any]]:
    """Yield every decodable JSON object in `text`, in order of where it starts.

    With `nested`, scanning resumes inside each candidate, so objects nested in
    a parent are yielded after it, and inner objects of a span that fails to
    decode are still found. Without it, only top-level spans are tried:
    scanning resumes after each span and stops at one that never closes.
    """
    start = text.find("{")
    while start != -1:
        end = _object_end(text, start)
        if end is None and not nested:
            return
        if end is not None:
            try:
                value = json.loads(text[start:end])
            except json.JSONDecodeError:
                value = None
            if isinstance(value, dict):
                yield value
        resume = start + 1 if nested else end
        start = text.find("{", resume)


def extract_json_object(text: str) -> Dict[str, Any]:
    """The first complete top-level JSON object in `text`.

    A truncated or invalid object is never replaced by one of its children.

    Raises:
        UnparsableResponse: no decodable object was found.
    """
    for value in iter_json_objects(text or "", nested=False):
        return value
    raise UnparsableResponse()


def parse_segment_payload(data: Dict[str, Any], provider: ProviderId, model: str) -> AnalysisResult:
    """Validate `{totalPopulation, segments: [{name, count, color}]}` from a model.

    A segment sum that differs from totalPopulation is logged, not rejected.

    Raises:
        MalformedSegmentData: fields are missing or have the wrong type/format.
    """
    try:
        result = AnalysisResult.model_validate({
            "totalPopulation": data.get("totalPopulation"),
            "segments": data.get("segments"),
            "provider": provider,
            "model": model,
        })
    except ValidationError as e:
        logger.warning(f"Malformed segment data from {provider.value}/{model}: {e}")
        raise MalformedSegmentData(str(e)) from e

    segment_sum = result.segment_sum()
    if segment_sum != result.total_population:
        logger.warning(
            f"Segments sum to {segment_sum:,} but totalPopulation is {result.total_population:,}"
        )

    return result


def parse_population_estimate(text: str) -> PopulationEstimate:
    """The first JSON object in `text` carrying a usable `label` and `value`.

    Raises:
        UnparsableResponse: no such object was found.
    """
    for value in iter_json_objects(text or ""):
        if "label" not in value or "value" not in value:
            continue
        try:
            return PopulationEstimate.model_validate(value)
        except ValidationError as e:
            logger.debug(f"Skipping unusable estimate {value}: {e}")
    raise UnparsableResponse("Could not resolve population. Try a number instead.")
