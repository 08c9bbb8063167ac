import asyncio
import aiohttp
from pathlib import Path
from typing import List, Optional, Sequence
from tqdm import tqdm

from colors import Colors
from config import Config
from errors import UpstreamFailure, UnsupportedMediaType, LocalIOFailure
from models import PageJob


MEDIA_TYPES = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def extension_for(media_type: Optional[str], url: str = "") -> str:
    media_type = (media_type or "").split(";")[0].strip().lower()
    try:
        return MEDIA_TYPES[media_type]
    except KeyError:
        raise UnsupportedMediaType(url, media_type) from None


class WorkerPool:
    """Drains a fully populated job queue with a fixed number of workers.

    Every worker owns its own client session. The first failure stops the
    remaining workers from claiming new jobs; once all of them have returned
    the failure is re-raised to the caller.
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg
        self.worker_count = cfg.worker_count
        self._failure: Optional[BaseException] = None
        self._bar: Optional[tqdm] = None

    async def run(self, jobs: Sequence[PageJob]) -> List[Path]:
        queue: asyncio.Queue = asyncio.Queue()
        for job in jobs:
            queue.put_nowait(job)

        self._failure = None
        written: List[Path] = []

        with tqdm(total=len(jobs), unit="img", desc="  Downloading",
                  disable=not self.cfg.show_progress) as bar:
            self._bar = bar
            workers = [
                asyncio.create_task(self._worker(wid, queue, written))
                for wid in range(self.worker_count)
            ]
            results = await asyncio.gather(*workers, return_exceptions=True)
            self._bar = None

        if self._failure is not None:
            raise self._failure
        for wid, result in enumerate(results):
            if isinstance(result, BaseException):
                raise result
            print(Colors.worker(wid, "finished"))

        return written

    def _note(self, msg: str):
        if self.cfg.show_progress:
            tqdm.write(msg)
        else:
            print(msg)

    async def _worker(self, wid: int, queue: asyncio.Queue, written: List[Path]):
        timeout = aiohttp.ClientTimeout(total=self.cfg.request_timeout)
        async with aiohttp.ClientSession(headers=self.cfg.headers, timeout=timeout) as session:
            while self._failure is None:
                try:
                    job = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return

                self._note(Colors.worker(wid, f"working on '{job.page_locator}'"))
                try:
                    written.append(await self.download(session, job))
                except Exception as e:
                    if self._failure is None:
                        self._failure = e
                    raise

                if self._bar is not None:
                    self._bar.update(1)

    async def download(self, session: aiohttp.ClientSession, job: PageJob) -> Path:
        url = job.page_locator
        try:
            async with session.get(url, headers={"Referer": job.referer}) as resp:
                if not 200 <= resp.status < 300:
                    raise UpstreamFailure(url, resp.status, resp.reason or "")
                ext = extension_for(resp.headers.get("Content-Type"), url)
                data = await resp.read()
        except asyncio.TimeoutError as e:
            raise UpstreamFailure(url, reason="timed out") from e
        except aiohttp.ClientError as e:
            raise UpstreamFailure(url, reason=str(e)) from e

        dest = job.destination.with_name(f"{job.destination.name}.{ext}")
        try:
            await asyncio.to_thread(dest.write_bytes, data)
        except OSError as e:
            raise LocalIOFailure(f"cannot write {dest}: {e}") from e
        return dest
