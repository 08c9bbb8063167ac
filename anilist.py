import asyncio
import aiohttp
from typing import Optional, Dict, Any

from config import Config
from errors import UpstreamFailure


MEDIA_QUERY = """
query ($idMal: Int) {
  Media(idMal: $idMal, type: MANGA) {
    id
    idMal
    title { romaji english native }
    description(asHtml: false)
    status
    format
    chapters
    volumes
    genres
    synonyms
    startDate { year month day }
    endDate { year month day }
    coverImage { extraLarge large color }
    bannerImage
  }
}
"""


class AniListClient:
    """Title-level metadata lookup, keyed by MyAnimeList id."""

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

    async def lookup(self, mal_id: int) -> Dict[str, Any]:
        url = self.cfg.anilist_api
        payload = {"query": MEDIA_QUERY, "variables": {"idMal": mal_id}}

        try:
            async with self._session.post(url, json=payload) as resp:
                if not 200 <= resp.status < 300:
                    raise UpstreamFailure(url, resp.status, resp.reason or "")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise UpstreamFailure(url, reason="timed out") from e
        except ValueError as e:
            raise UpstreamFailure(url, reason=f"invalid JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise UpstreamFailure(url, reason=str(e)) from e

        if not isinstance(data, dict):
            raise UpstreamFailure(url, reason="response is not a JSON object")

        errors = data.get("errors")
        if errors:
            message = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else str(errors[0])
            raise UpstreamFailure(url, reason=f"AniList: {message}")

        media = (data.get("data") or {}).get("Media")
        if not media:
            raise UpstreamFailure(url, reason=f"no AniList entry for MAL id {mal_id}")

        return media
