"""Human-readable population numbers and segment identifiers."""

import math
import random
import re
import string

_SHORTHAND = re.compile(r"^([\d.,]+)\s*([kmb])", re.IGNORECASE)
_MULTIPLIERS = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}
_ID_ALPHABET = string.ascii_lowercase + string.digits


def _trim(value: float) -> str:
    return str(int(value)) if value == int(value) else str(value)


def format_number(n: float) -> str:
    """Abbreviate a population count, e.g. 8_100_000_000 -> '~8.1B'.

    Exact multiples of a unit render without the '~' prefix.
    """
    if n >= 1_000_000_000:
        val = n / 1_000_000_000
        return f"{_trim(val)}B" if val % 1 == 0 else f"~{val:.1f}B"
    if n >= 1_000_000:
        val = n / 1_000_000
        return f"{_trim(val)}M" if val % 1 == 0 else f"~{val:.1f}M"
    if n >= 1_000:
        val = n / 1_000
        return f"{_trim(val)}K" if val % 1 == 0 else f"~{val:.0f}K"
    return _trim(n)


def parse_population_input(text: str) -> int:
    """Parse '500M', '1.5b', '200k' or '1,234,567'. Returns 0 when unparsable."""
    trimmed = text.strip().lower()

    match = _SHORTHAND.match(trimmed)
    if match:
        try:
            num = float(match.group(1).replace(",", ""))
        except ValueError:
            return 0
        return round(num * _MULTIPLIERS[match.group(2).lower()])

    digits = re.sub(r"[^0-9]", "", trimmed)
    return int(digits) if digits else 0


def segment_share_label(count: int, total: int) -> str:
    """Legend percentage: one decimal with '~' below 1%, whole percent otherwise."""
    if total <= 0:
        return "0%"
    pct = count / total * 100
    if pct < 1:
        return f"~{pct:.1f}%"
    return f"{math.floor(pct + 0.5)}%"


def generate_id(length: int = 7) -> str:
    return "".join(random.choices(_ID_ALPHABET, k=length))
