"""Extractor helpers that turn YouTube's free-text fields into canonical values.

None of these functions raise: the fields they produce are cosmetic metadata,
so unparseable input degrades to an empty string (or "now" for dates).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

ISO_DURATION_RE = re.compile(r"P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?", re.IGNORECASE)
# Hours are only recognised ahead of a two-digit minutes field; "123:45" is minutes.
CLOCK_RE = re.compile(r"^(?:(\d+):(?=\d{1,2}:))?(\d+):(\d{1,2})$")
NUMERIC_RUN_RE = re.compile(r"(\d[\d,.]*)\s*(thousand|million|billion|[KMB])?(?![a-z])", re.IGNORECASE)
ABBREVIATED_RE = re.compile(r"^([\d.]+)([KMB])?$", re.IGNORECASE)

# Evaluated in order; the first pattern that matches decides the unit.
RELATIVE_OFFSETS: tuple[tuple[re.Pattern[str], timedelta], ...] = (
    (re.compile(r"(\d+)\s*years?", re.IGNORECASE), timedelta(days=365)),
    (re.compile(r"(\d+)\s*months?", re.IGNORECASE), timedelta(days=30)),
    (re.compile(r"(\d+)\s*weeks?", re.IGNORECASE), timedelta(weeks=1)),
    (re.compile(r"(\d+)\s*days?", re.IGNORECASE), timedelta(days=1)),
    (re.compile(r"(\d+)\s*hours?", re.IGNORECASE), timedelta(hours=1)),
)

_SUFFIX_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}
_SCALE_WORDS = {"thousand": "K", "million": "M", "billion": "B"}


def iso8601_to_seconds(duration: str) -> int:
    """Convert ISO8601 duration strings (PTxxHxxMxxS) into seconds."""
    match = ISO_DURATION_RE.fullmatch(duration.strip())
    if not match:
        return 0
    days, hours, minutes, seconds = match.groups()
    return (
        int(days or 0) * 86400
        + int(hours or 0) * 3600
        + int(minutes or 0) * 60
        + int(seconds or 0)
    )


def format_clock(total_seconds: int) -> str:
    hours, remainder = divmod(max(total_seconds, 0), 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_duration(raw: Optional[str]) -> str:
    """Normalize an ISO-8601 duration, a seconds count or a clock string.

    >>> parse_duration("PT1H5M9S")
    '1:05:09'
    >>> parse_duration("754")
    '12:34'
    """
    if raw is None:
        return ""
    text = str(raw).strip()
    if not text:
        return ""
    if text.upper().startswith("P"):
        if not ISO_DURATION_RE.fullmatch(text):
            return ""
        return format_clock(iso8601_to_seconds(text))
    if text.isdigit():
        return format_clock(int(text))
    clock = CLOCK_RE.match(text)
    if clock:
        hours, minutes, seconds = (int(part or 0) for part in clock.groups())
        return format_clock(hours * 3600 + minutes * 60 + seconds)
    return ""


def format_count(count: int) -> str:
    """Abbreviate a count with one decimal and a K/M suffix."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def parse_view_count(raw: Optional[str | int]) -> str:
    """Extract the first number from view-count text and abbreviate it."""
    if raw is None:
        return ""
    text = str(raw).strip()
    match = NUMERIC_RUN_RE.search(text)
    if not match:
        return ""
    number, suffix = match.group(1).strip(), match.group(2)
    if suffix:
        # Already abbreviated upstream ("1.2M views"); keep the figure as shown.
        suffix = _SCALE_WORDS.get(suffix.lower(), suffix.upper())
        return f"{number.replace(',', '.')}{suffix}"
    digits = re.sub(r"\D", "", number)
    if not digits:
        return ""
    return format_count(int(digits))


def view_count_to_int(text: Optional[str]) -> int:
    """Parse an abbreviated count back to an integer, for comparisons only."""
    if not text:
        return 0
    match = ABBREVIATED_RE.match(text.strip().replace(",", ""))
    if not match:
        return 0
    number, suffix = match.groups()
    try:
        value = float(number)
    except ValueError:
        return 0
    return int(round(value * _SUFFIX_MULTIPLIERS.get((suffix or "").upper(), 1)))


def to_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def estimate_publish_date(relative_text: Optional[str], now: Optional[datetime] = None) -> str:
    """Turn "3 weeks ago" style text into an estimated absolute timestamp.

    Text that matches no unit (including minutes and "just now") is treated
    as published at ``now``.
    """
    current = now or datetime.now(timezone.utc)
    text = relative_text or ""
    for pattern, unit in RELATIVE_OFFSETS:
        match = pattern.search(text)
        if match:
            return to_iso(current - unit * int(match.group(1)))
    return to_iso(current)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 timestamps or bare dates; naive values are UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
