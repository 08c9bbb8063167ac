import asyncio
from contextlib import asynccontextmanager
from typing import List, Tuple

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from config import Config
from models import ChapterDescriptor


class ImageHost:
    """Serves fake page images.

    ``?type=`` sets the Content-Type, ``?delay=`` holds the response back,
    names starting with ``missing`` answer 404.
    """

    def __init__(self):
        self.requests: List[Tuple[str, str]] = []
        self.server = None

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/img/{name}", self.handle)
        return app

    async def handle(self, request):
        name = request.match_info["name"]
        self.requests.append((name, request.headers.get("Referer")))
        await asyncio.sleep(float(request.query.get("delay", 0)))
        if name.startswith("missing"):
            return web.Response(status=404)
        ctype = request.query.get("type", "image/jpeg")
        return web.Response(body=f"image:{name}".encode(), headers={"Content-Type": ctype})

    def url(self, name: str, **query) -> str:
        url = self.server.make_url(f"/img/{name}")
        if query:
            url = url.with_query({k: str(v) for k, v in query.items()})
        return str(url)


@asynccontextmanager
async def serve(host: ImageHost):
    host.server = TestServer(host.make_app())
    await host.server.start_server()
    try:
        yield host
    finally:
        await host.server.close()


class FakeSource:
    """In-memory catalog walker and page resolver.

    *pages* holds one list of page locators per chapter, oldest first.
    """

    def __init__(self, names, pages):
        self.names = list(names)
        self.pages = [list(p) for p in pages]
        self.discover_calls = 0
        self.resolve_calls: List[str] = []

    def __call__(self, cfg):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass

    @staticmethod
    def locator(index: int) -> str:
        return f"https://source.test/chapters/{index}"

    async def discover(self, source_id):
        self.discover_calls += 1
        return [
            ChapterDescriptor(index=i, display_name=name, source_locator=self.locator(i))
            for i, name in enumerate(self.names, start=1)
        ]

    async def resolve_pages(self, source_locator):
        self.resolve_calls.append(source_locator)
        index = int(source_locator.rsplit("/", 1)[1])
        return self.pages[index - 1]


@pytest.fixture
def cfg(tmp_path):
    return Config(base_dir=tmp_path / "library", worker_count=2,
                  request_delay=0, show_progress=False)


@pytest.fixture
def image_host():
    return ImageHost()
