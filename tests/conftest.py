"""Shared fixtures: sample payloads, configs, and a local reading-list API."""

from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from upnext_cli.models.config import AppConfig


def make_item(
    english: str | None = None,
    romaji: str | None = None,
    progress: Any = 0,
    inferred: float | None = None,
    last_chapter: float | None = None,
    large: str | None = None,
    color: str | None = None,
) -> dict[str, Any]:
    """Builds one raw reading-list item shaped like the remote payload."""
    return {
        "progress": progress,
        "media": {
            "title": {"english": english, "romaji": romaji},
            "coverImage": {"large": large, "color": color},
            "inferredChapterCount": inferred,
            "comickMatch": (
                {"lastChapter": last_chapter} if last_chapter is not None else None
            ),
        },
    }


@pytest.fixture
def sample_payload() -> list[dict[str, Any]]:
    """Five items: three behind, one caught up, one without media."""
    return [
        make_item(english="Far Behind", progress=10, inferred=40, color="#112233"),
        make_item(romaji="Almost There", progress=99, last_chapter=100),
        make_item(english="Caught Up", progress=50, inferred=50),
        {"progress": 3, "media": None},
        make_item(
            english="Middle",
            progress=5,
            inferred=15,
            large="https://img.example/middle.jpg",
        ),
    ]


@dataclass
class ServerState:
    """Controls what the local reading-list API answers."""

    status: int = 200
    body: Any = field(default_factory=list)
    raw_body: str | None = None
    requests: list[web.Request] = field(default_factory=list)


@pytest_asyncio.fixture
async def reading_list_server():
    """Serves the reading-list route on localhost; yields (server, state)."""
    state = ServerState()

    async def handler(request: web.Request) -> web.Response:
        state.requests.append(request)
        if state.status != 200:
            return web.Response(status=state.status, text="upstream error")
        if state.raw_body is not None:
            return web.Response(text=state.raw_body, content_type="application/json")
        return web.json_response(state.body)

    web_app = web.Application()
    web_app.router.add_get("/api/anilist/reading-list/{username}", handler)

    server = TestServer(web_app)
    await server.start_server()
    try:
        yield server, state
    finally:
        await server.close()


@pytest.fixture
def make_config(tmp_path):
    """Factory for configs that keep their cache under tmp_path."""

    def _make(base_url: str = "https://reading.example", **overrides) -> AppConfig:
        values = {
            "username": "reader",
            "api_base_url": base_url,
            "config_path": str(tmp_path),
        }
        values.update(overrides)
        return AppConfig(**values)

    return _make


@pytest.fixture
def server_config(reading_list_server, make_config) -> AppConfig:
    server, _ = reading_list_server
    return make_config(str(server.make_url("/")))
