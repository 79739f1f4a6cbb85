from __future__ import annotations

import math
import re
from collections.abc import Iterable

from ..models.point import CoordinatePair

"""Coordinate normalizer for historical atlas DMS notation.

Converts degree-minute-second tokens such as ``12-30-15`` into signed decimal
degrees and coordinate pair tokens such as ``12-30N/92-50E`` into validated
(latitude, longitude) pairs.

Malformed input is the normal case for transcribed atlas data, so nothing in
this module raises for it:
- ``dms_to_decimal`` returns ``math.nan``
- ``parse_coordinate_pair`` returns ``None``
"""

__all__ = [
    "PLACEHOLDERS",
    "CoordinateCache",
    "dms_to_decimal",
    "is_placeholder",
    "parse_coordinate_pair",
]

# Source data uses these to mean "location unknown"
PLACEHOLDERS: frozenset[str] = frozenset({"-", "??"})

LAT_MIN, LAT_MAX = -90.0, 90.0
LON_MIN, LON_MAX = -180.0, 180.0

_LAT_PATTERN = re.compile(r"^([\d.-]+)([NS])$", re.ASCII | re.IGNORECASE)
_LON_PATTERN = re.compile(r"^([\d.-]+)([EW])$", re.ASCII | re.IGNORECASE)

# Divisors for degrees, minutes, seconds
_DMS_DIVISORS = (1.0, 60.0, 3600.0)

_UNPARSEABLE = object()


class CoordinateCache:
    """Key-value store of parse results keyed by the exact raw token.

    A cached ``None`` means the token was attempted and is unparseable, which is
    distinct from a token that was never attempted (``lookup`` returns
    ``CoordinateCache.MISS``). ``max_entries=None`` keeps the cache unbounded;
    otherwise the oldest entry is evicted first.
    """

    MISS = object()

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")
        self.max_entries = max_entries
        self._entries: dict[str, object] = {}
        self.hits = 0
        self.misses = 0

    def lookup(self, token: str) -> CoordinatePair | None | object:
        value = self._entries.get(token, CoordinateCache.MISS)
        if value is CoordinateCache.MISS:
            self.misses += 1
            return CoordinateCache.MISS
        self.hits += 1
        return None if value is _UNPARSEABLE else value

    def store(self, token: str, result: CoordinatePair | None) -> None:
        if self.max_entries is not None and token not in self._entries:
            while len(self._entries) >= self.max_entries:
                # dicts keep insertion order: first key is the oldest
                del self._entries[next(iter(self._entries))]
        self._entries[token] = _UNPARSEABLE if result is None else result

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def is_placeholder(value: str | None, placeholders: Iterable[str] = PLACEHOLDERS) -> bool:
    """Return True for empty, blank or "unknown" placeholder values (surrounding whitespace ignored)."""
    if value is None:
        return True
    text = value.strip()
    return text == "" or text in placeholders


def _parse_float(text: str) -> float:
    # float() also accepts non-ASCII digits such as "١٢"
    if not text.isascii():
        return math.nan
    try:
        value = float(text)
    except ValueError:
        return math.nan
    # "inf" and "nan" parse as floats but are not DMS components
    return value if math.isfinite(value) else math.nan


def dms_to_decimal(token: str) -> float:
    """Convert a ``degrees[-minutes[-seconds]]`` token to decimal degrees.

    Args:
        token: One to three dash-separated numeric components, e.g. ``"12-30-15"``

    Returns:
        ``degrees + minutes/60 + seconds/3600`` using only the components present,
        or ``math.nan`` when any component is not a number or there are more
        than three components.
    """
    parts = [_parse_float(p) for p in token.split("-")]
    if not parts or len(parts) > len(_DMS_DIVISORS):
        return math.nan
    if any(math.isnan(p) for p in parts):
        return math.nan
    return sum(p / d for p, d in zip(parts, _DMS_DIVISORS))


def _parse_half(text: str, pattern: re.Pattern[str], negative: str) -> float:
    match = pattern.match(text.strip())
    if match is None:
        return math.nan
    numbers, hemisphere = match.groups()
    value = dms_to_decimal(numbers)
    if hemisphere.upper() == negative:
        value = -value
    return value


def _parse_uncached(raw: str) -> CoordinatePair | None:
    halves = raw.split("/")
    if len(halves) != 2:
        return None
    lat_text, lon_text = halves
    if not lat_text.strip() or not lon_text.strip():
        return None

    latitude = _parse_half(lat_text, _LAT_PATTERN, negative="S")
    longitude = _parse_half(lon_text, _LON_PATTERN, negative="W")

    if math.isnan(latitude) or math.isnan(longitude):
        return None
    if not (LAT_MIN <= latitude <= LAT_MAX) or not (LON_MIN <= longitude <= LON_MAX):
        return None
    return CoordinatePair(latitude=latitude, longitude=longitude)


def parse_coordinate_pair(
    raw: str | None,
    cache: CoordinateCache | None = None,
    placeholders: Iterable[str] = PLACEHOLDERS,
) -> CoordinatePair | None:
    """Parse one ``lat/lon`` token such as ``"12-30N/92-50E"``.

    The latitude half must end in N or S and the longitude half in E or W
    (case-insensitive). S and W negate the value. Results outside
    [-90, 90] / [-180, 180] are rejected.

    Args:
        raw: A single coordinate pair token (already split on ``+``)
        cache: Optional parse cache; results, including failures, are stored
            under the exact ``raw`` string
        placeholders: Values meaning "unknown" that are rejected outright

    Returns:
        The parsed pair, or None when the token is blank, a placeholder, or
        malformed in any way.
    """
    if not isinstance(raw, str) or is_placeholder(raw, placeholders):
        return None

    if cache is not None:
        cached = cache.lookup(raw)
        if cached is not CoordinateCache.MISS:
            return cached  # type: ignore[return-value]

    result = _parse_uncached(raw)
    if cache is not None:
        cache.store(raw, result)
    return result
