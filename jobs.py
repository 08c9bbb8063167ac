import asyncio
from typing import Dict, List, Sequence

from colors import Colors
from errors import LocalIOFailure
from models import ChapterDescriptor, PageJob
from state import TitlePaths, NAME_SIDECAR


class JobCompiler:
    """Expands missing chapters into one PageJob per page.

    Page lists are resolved lazily and cached for the life of the compiler,
    so a chapter is never resolved twice within one run.
    """

    def __init__(self, resolver, paths: TitlePaths, request_delay: float = 0.0):
        self.resolver = resolver
        self.paths = paths
        self.request_delay = request_delay
        self._pages: Dict[int, List[str]] = {}
        self._resolved_any = False

    async def pages_for(self, chapter: ChapterDescriptor) -> List[str]:
        if chapter.index in self._pages:
            return self._pages[chapter.index]

        if self._resolved_any and self.request_delay > 0:
            await asyncio.sleep(self.request_delay)
        self._resolved_any = True

        pages = list(await self.resolver.resolve_pages(chapter.source_locator))
        self._pages[chapter.index] = pages
        return pages

    def _prepare_dir(self, chapter: ChapterDescriptor):
        dest = self.paths.chapter_dir(chapter.index)
        try:
            dest.mkdir(parents=True, exist_ok=True)
            (dest / NAME_SIDECAR).write_text(chapter.display_name, encoding="utf-8")
        except OSError as e:
            raise LocalIOFailure(f"cannot prepare {dest}: {e}") from e
        return dest

    async def compile(self, chapters: Sequence[ChapterDescriptor],
                      missing: Sequence[int]) -> List[PageJob]:
        by_index = {c.index: c for c in chapters}
        jobs: List[PageJob] = []

        for index in sorted(missing):
            chapter = by_index.get(index)
            if chapter is None:
                print(Colors.warning(f"Unknown chapter index: {index}"))
                continue

            dest = self._prepare_dir(chapter)
            pages = await self.pages_for(chapter)
            print(f"  {Colors.chapter(index)} | {chapter.display_name} | Pages: {len(pages)}")

            for position, page in enumerate(pages):
                jobs.append(PageJob(
                    referer=chapter.source_locator,
                    page_locator=page,
                    destination=dest / str(position),
                ))

        return jobs
