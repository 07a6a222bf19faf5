"""Pull structured data out of public youtube.com HTML pages."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..core.models import RawItem

logger = logging.getLogger(__name__)


def _assignment_patterns(name: str) -> Tuple[re.Pattern[str], ...]:
    """Quoted-string form first; it is the only form carrying ``\\xNN`` escapes."""
    var = re.escape(name)
    return (
        re.compile(rf"{var}\s*=\s*'(.*?)';", re.DOTALL),
        re.compile(rf"(?:var\s+|window\[\"|window\.){var}\"?\]?\s*=\s*(\{{.*?\}});\s*</script>", re.DOTALL),
        re.compile(rf"{var}\s*=\s*(\{{.*?\}});", re.DOTALL),
    )


INITIAL_DATA_PATTERNS = _assignment_patterns("ytInitialData")
PLAYER_RESPONSE_PATTERNS = _assignment_patterns("ytInitialPlayerResponse")
HEX_ESCAPE_RE = re.compile(r"\\x([0-9a-fA-F]{2})")
VIDEO_ID_SWEEP_PATTERNS = (
    re.compile(r'"videoId"\s*:\s*"([A-Za-z0-9_-]{11})"'),
    re.compile(r"watch\?v=([A-Za-z0-9_-]{11})"),
)


def unescape_hex(text: str) -> str:
    """Replace ``\\xNN`` byte escapes with the characters they encode."""
    return HEX_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)


def _extract_assignment(html: str, patterns: Tuple[re.Pattern[str], ...], name: str) -> Optional[Dict[str, Any]]:
    if not html:
        return None
    for index, pattern in enumerate(patterns):
        match = pattern.search(html)
        if not match:
            continue
        blob = match.group(1)
        if index == 0:
            blob = unescape_hex(blob)
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as exc:
            logger.debug("%s candidate failed to decode: %s", name, exc)
            continue
        if isinstance(data, dict):
            return data
    return None


def extract_initial_data(html: str) -> Optional[Dict[str, Any]]:
    """Locate and decode the inline ``ytInitialData`` assignment, if any."""
    return _extract_assignment(html, INITIAL_DATA_PATTERNS, "ytInitialData")


def extract_player_response(html: str) -> Optional[Dict[str, Any]]:
    """Locate and decode the watch page's ``ytInitialPlayerResponse``, if any."""
    return _extract_assignment(html, PLAYER_RESPONSE_PATTERNS, "ytInitialPlayerResponse")


def sweep_video_ids(html: str) -> List[RawItem]:
    """Last-resort id harvest: metadata-free records in first-seen order."""
    seen: dict[str, None] = {}
    for pattern in VIDEO_ID_SWEEP_PATTERNS:
        for video_id in pattern.findall(html or ""):
            seen.setdefault(video_id, None)
    return [RawItem(video_id=video_id) for video_id in seen]
