"""Parse YouTube Atom feeds (``/feeds/videos.xml``) into raw items."""

from __future__ import annotations

import logging
from typing import List, Optional
from xml.etree import ElementTree as ET

from ..core.models import RawItem
from .innertube import VIDEO_ID_RE

logger = logging.getLogger(__name__)

FEED_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "yt": "http://www.youtube.com/xml/schemas/2015",
    "media": "http://search.yahoo.com/mrss/",
}


def _attr(node: Optional[ET.Element], name: str) -> str:
    return (node.get(name) or "").strip() if node is not None else ""


def _entry_to_raw(entry: ET.Element) -> Optional[RawItem]:
    video_id = entry.findtext("yt:videoId", default="", namespaces=FEED_NS).strip()
    if not VIDEO_ID_RE.match(video_id):
        return None
    group = entry.find("media:group", FEED_NS)
    title = entry.findtext("atom:title", default="", namespaces=FEED_NS)
    description = ""
    thumbnail = views = ""
    if group is not None:
        title = group.findtext("media:title", default=title, namespaces=FEED_NS)
        description = group.findtext("media:description", default="", namespaces=FEED_NS)
        thumbnail = _attr(group.find("media:thumbnail", FEED_NS), "url")
        views = _attr(group.find("media:community/media:statistics", FEED_NS), "views")
    published = entry.findtext("atom:published", default="", namespaces=FEED_NS) or entry.findtext(
        "atom:updated", default="", namespaces=FEED_NS
    )
    return RawItem(
        video_id=video_id,
        title=title.strip(),
        description=description.strip(),
        channel_name=entry.findtext("atom:author/atom:name", default="", namespaces=FEED_NS).strip(),
        channel_id=entry.findtext("yt:channelId", default="", namespaces=FEED_NS).strip(),
        view_text=views,
        published_at=published.strip(),
        thumbnail=thumbnail,
    )


def parse_feed(xml_text: str) -> List[RawItem]:
    """Return one raw item per feed entry carrying a valid video id."""
    if not xml_text or not xml_text.strip():
        return []
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        logger.warning("Malformed video feed: %s", exc)
        return []
    items: List[RawItem] = []
    for entry in root.findall("atom:entry", FEED_NS):
        raw = _entry_to_raw(entry)
        if raw is not None:
            items.append(raw)
    return items


def parse_feed_title(xml_text: str) -> str:
    """Feed-level title, which for channel feeds is the channel name."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError:
        return ""
    return root.findtext("atom:title", default="", namespaces=FEED_NS).strip()
