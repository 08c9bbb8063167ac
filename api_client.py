import asyncio
import aiohttp
from bs4 import BeautifulSoup
from typing import Optional, List, Dict, Any
from urllib.parse import urljoin

from config import Config
from errors import UpstreamFailure
from models import ChapterDescriptor, SearchResult


class SourceClient:
    """Catalog walker and page resolver for mangapill.

    Every non-success response is fatal, there is no retry.
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        timeout = aiohttp.ClientTimeout(total=self.cfg.request_timeout)
        self._session = aiohttp.ClientSession(headers=self.cfg.headers, timeout=timeout)
        return self

    async def __aexit__(self, *args):
        if self._session:
            await self._session.close()

    async def _get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        try:
            async with self._session.get(url, params=params) as resp:
                if not 200 <= resp.status < 300:
                    raise UpstreamFailure(url, resp.status, resp.reason or "")
                return await resp.text()
        except asyncio.TimeoutError as e:
            raise UpstreamFailure(url, reason="timed out") from e
        except UnicodeDecodeError as e:
            raise UpstreamFailure(url, reason=f"undecodable page: {e.reason}") from e
        except aiohttp.ClientError as e:
            raise UpstreamFailure(url, reason=str(e)) from e

    def manga_url(self, source_id: int) -> str:
        return f"{self.cfg.source_base}/manga/{source_id}"

    async def discover(self, source_id: int) -> List[ChapterDescriptor]:
        url = self.manga_url(source_id)
        html = await self._get_text(url)
        return self.parse_chapter_list(html, url)

    @staticmethod
    def parse_chapter_list(html: str, base_url: str) -> List[ChapterDescriptor]:
        soup = BeautifulSoup(html, "html.parser")
        container = soup.select_one("#chapters")
        if container is None:
            raise UpstreamFailure(base_url, reason="no chapter list on title page")

        raw = []
        for a in container.select("a"):
            href = a.get("href")
            if not href:
                continue
            raw.append((a.get_text(strip=True), urljoin(base_url, href)))

        # listed newest first
        raw.reverse()
        return [
            ChapterDescriptor(index=i, display_name=name, source_locator=link)
            for i, (name, link) in enumerate(raw, start=1)
        ]

    async def resolve_pages(self, source_locator: str) -> List[str]:
        html = await self._get_text(source_locator)
        return self.parse_page_list(html)

    @staticmethod
    def parse_page_list(html: str) -> List[str]:
        soup = BeautifulSoup(html, "html.parser")
        pages = []
        for img in soup.select("chapter-page img"):
            src = img.get("data-src") or img.get("src")
            if src:
                pages.append(src)
        return pages

    async def search(self, query: str) -> List[SearchResult]:
        url = f"{self.cfg.source_base}/search"
        html = await self._get_text(url, params={"q": query, "type": "manga", "status": ""})
        return self.parse_search(html)

    @staticmethod
    def parse_search(html: str) -> List[SearchResult]:
        soup = BeautifulSoup(html, "html.parser")
        results: List[SearchResult] = []
        seen = set()

        for a in soup.select("a[href^='/manga/']"):
            parts = a["href"].strip("/").split("/")
            if len(parts) < 2 or not parts[1].isdigit():
                continue
            source_id = int(parts[1])
            name = a.get_text(" ", strip=True)
            if source_id in seen or not name:
                continue
            seen.add(source_id)
            results.append(SearchResult(id=source_id, name=name))

        return results
