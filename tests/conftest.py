"""
Shared pytest fixtures for edufeed tests.

Provides canned Innertube / feed / HTML payload builders and a fake
youtube.com served through ``httpx.MockTransport``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from edufeed.aggregator.pipeline import ContentAggregator
from edufeed.config import AppConfig


def vid(n: int) -> str:
    """Deterministic 11-character video id."""
    return f"vid{n:08d}"


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def video_renderer(
    video_id: str,
    title: str = "Lesson",
    *,
    channel: str = "Edu Channel",
    channel_id: str = "UCedu0000000000000000000",
    views: Optional[str] = "1,234 views",
    length: Optional[str] = "12:34",
    published: Optional[str] = "2 weeks ago",
    description: str = "",
    kind: str = "videoRenderer",
) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "videoId": video_id,
        "title": {"runs": [{"text": title}]},
        "ownerText": {
            "runs": [
                {
                    "text": channel,
                    "navigationEndpoint": {"browseEndpoint": {"browseId": channel_id}},
                }
            ]
        },
        "thumbnail": {
            "thumbnails": [
                {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg", "width": 120},
                {"url": f"https://i.ytimg.com/vi/{video_id}/hq720.jpg", "width": 720},
            ]
        },
    }
    if views is not None:
        node["viewCountText"] = {"simpleText": views}
    if length is not None:
        node["lengthText"] = {"simpleText": length}
    if published is not None:
        node["publishedTimeText"] = {"simpleText": published}
    if description:
        node["detailedMetadataSnippets"] = [{"snippetText": {"runs": [{"text": description}]}}]
    return {kind: node}


def playlist_video_renderer(
    video_id: str,
    title: str = "Part",
    *,
    length_seconds: Any = "754",
    info: Tuple[str, ...] = ("1.2M views", " • ", "3 years ago"),
) -> Dict[str, Any]:
    return {
        "playlistVideoRenderer": {
            "videoId": video_id,
            "title": {"runs": [{"text": title}]},
            "shortBylineText": {
                "runs": [
                    {
                        "text": "Course Channel",
                        "navigationEndpoint": {"browseEndpoint": {"browseId": "UCcourse000000000000000"}},
                    }
                ]
            },
            "lengthSeconds": length_seconds,
            "videoInfo": {"runs": [{"text": part} for part in info]},
        }
    }


def search_response(*items: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [{"itemSectionRenderer": {"contents": list(items)}}]
                    }
                }
            }
        }
    }


def playlist_browse_response(*items: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "contents": {
            "twoColumnBrowseResultsRenderer": {
                "tabs": [
                    {
                        "tabRenderer": {
                            "content": {
                                "sectionListRenderer": {
                                    "contents": [
                                        {
                                            "itemSectionRenderer": {
                                                "contents": [
                                                    {"playlistVideoListRenderer": {"contents": list(items)}}
                                                ]
                                            }
                                        }
                                    ]
                                }
                            }
                        }
                    }
                ]
            }
        }
    }


def rich_grid_response(*items: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "contents": {
            "twoColumnBrowseResultsRenderer": {
                "tabs": [
                    {"tabRenderer": {"title": "Home"}},
                    {
                        "tabRenderer": {
                            "content": {
                                "richGridRenderer": {
                                    "contents": [{"richItemRenderer": {"content": item}} for item in items]
                                    + [{"continuationItemRenderer": {}}]
                                }
                            }
                        }
                    },
                ]
            }
        }
    }


def feed_xml(entries: List[Dict[str, str]], title: str = "Course Channel") -> str:
    body = []
    for entry in entries:
        body.append(
            f"""
  <entry>
    <id>yt:video:{entry['id']}</id>
    <yt:videoId>{entry['id']}</yt:videoId>
    <yt:channelId>UCcourse000000000000000</yt:channelId>
    <title>{entry.get('title', 'Feed video')}</title>
    <author><name>{title}</name></author>
    <published>{entry.get('published', '2024-03-01T10:00:00+00:00')}</published>
    <updated>2024-03-02T10:00:00+00:00</updated>
    <media:group>
      <media:title>{entry.get('title', 'Feed video')}</media:title>
      <media:thumbnail url="https://i1.ytimg.com/vi/{entry['id']}/hqdefault.jpg" width="480" height="360"/>
      <media:description>{entry.get('description', '')}</media:description>
      <media:community>
        <media:statistics views="{entry.get('views', '4321')}"/>
      </media:community>
    </media:group>
  </entry>"""
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" '
        'xmlns:media="http://search.yahoo.com/mrss/" xmlns="http://www.w3.org/2005/Atom">\n'
        f"  <title>{title}</title>" + "".join(body) + "\n</feed>"
    )


def html_page(data: Dict[str, Any]) -> str:
    blob = json.dumps(data)
    return (
        "<html><head><title>YouTube</title></head><body>"
        f"<script nonce=\"abc\">var ytInitialData = {blob};</script>"
        "<script>var other = 1;</script></body></html>"
    )


def player_response(
    video_id: str,
    title: str = "Full lecture",
    *,
    author: str = "Open University",
    channel_id: str = "UCopen000000000000000000",
    length_seconds: str = "3725",
    view_count: str = "48213",
    publish_date: str = "2023-09-14",
) -> Dict[str, Any]:
    return {
        "playabilityStatus": {"status": "OK"},
        "videoDetails": {
            "videoId": video_id,
            "title": title,
            "lengthSeconds": length_seconds,
            "channelId": channel_id,
            "shortDescription": "Week one of the course.",
            "thumbnail": {
                "thumbnails": [
                    {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg", "width": 120},
                    {"url": f"https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg", "width": 1280},
                ]
            },
            "viewCount": view_count,
            "author": author,
        },
        "microformat": {"playerMicroformatRenderer": {"publishDate": publish_date, "uploadDate": publish_date}},
    }


def watch_page(data: Dict[str, Any]) -> str:
    blob = json.dumps(data)
    return (
        "<html><body>"
        f"<script nonce=\"abc\">var ytInitialPlayerResponse = {blob};var meta = document.createElement('meta');</script>"
        "</body></html>"
    )


# ---------------------------------------------------------------------------
# Fake youtube.com
# ---------------------------------------------------------------------------

class FakeYouTube:
    """Routes httpx requests to canned payloads and records every request."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.search_results: Dict[str, Dict[str, Any]] = {}
        self.browse_results: Dict[str, Dict[str, Any]] = {}
        self.players: Dict[str, Dict[str, Any]] = {}
        self.feeds: Dict[str, str] = {}
        self.pages: Dict[Tuple[str, str], str] = {}
        self.innertube_status = 200
        self.innertube_error: Optional[Exception] = None

    def innertube_bodies(self, endpoint: str = "search") -> List[Dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path == f"/youtubei/v1/{endpoint}"
        ]

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path.startswith("/youtubei/v1/"):
            if self.innertube_error is not None:
                raise self.innertube_error
            if self.innertube_status != 200:
                return httpx.Response(self.innertube_status, json={"error": "nope"})
            body = json.loads(request.content)
            if path.endswith("/search"):
                return httpx.Response(200, json=self.search_results.get(body.get("query", ""), {"contents": {}}))
            if path.endswith("/player"):
                missing = {"playabilityStatus": {"status": "ERROR"}}
                return httpx.Response(200, json=self.players.get(body.get("videoId", ""), missing))
            return httpx.Response(200, json=self.browse_results.get(body.get("browseId", ""), {}))

        if path == "/feeds/videos.xml":
            key = params.get("playlist_id") or params.get("channel_id") or ""
            if key in self.feeds:
                return httpx.Response(200, text=self.feeds[key])
            return httpx.Response(404)

        if path == "/results":
            page = self.pages.get(("search", params.get("search_query", "")))
        elif path == "/playlist":
            page = self.pages.get(("playlist", params.get("list", "")))
        elif path == "/watch":
            page = self.pages.get(("watch", params.get("v", "")))
        elif path.startswith("/channel/"):
            page = self.pages.get(("channel", path.split("/")[2]))
        else:
            page = None
        if page is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=page)


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return AppConfig(
        APP_LOG_PATH=str(tmp_path / "logs" / "edufeed.log"),
        APP_FETCH_ATTEMPTS=1,
        APP_MAX_RESULTS=50,
        YOUTUBE_API_KEY=None,
    )


@pytest.fixture
def fake_youtube() -> FakeYouTube:
    return FakeYouTube()


@pytest.fixture
def http_client(fake_youtube: FakeYouTube) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_youtube.handler))


@pytest.fixture
def aggregator(config: AppConfig, http_client: httpx.AsyncClient) -> ContentAggregator:
    return ContentAggregator(config, http_client=http_client)
