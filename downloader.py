from typing import List

from anilist import AniListClient
from api_client import SourceClient
from colors import Colors
from config import Config
from jobs import JobCompiler
from metadata import MetadataWriter
from models import RunReport, TitleIds
from reconciler import reconcile, check_consistency, find_orphans, discard_orphans
from state import TitlePaths, read_local_state, save_title_ids, write_json_atomic, find_titles
from workers import WorkerPool


class TitleMirror:
    def __init__(self, cfg: Config, source_factory=SourceClient, anilist_factory=AniListClient):
        self.cfg = cfg
        self.source_factory = source_factory
        self.anilist_factory = anilist_factory

    def paths(self, mal_id: int) -> TitlePaths:
        return TitlePaths.for_title(self.cfg.base_dir, mal_id)

    async def add(self, ids: TitleIds) -> int:
        """Register a title: metadata lookup, catalog check, persisted ids."""
        paths = self.paths(ids.mal_id)

        if paths.metadata_doc.is_file():
            print(Colors.info(f"Metadata already present for MAL id {ids.mal_id}, skipping lookup"))
        else:
            print(Colors.info(f"Fetching AniList metadata (MAL id: {ids.mal_id})"))
            async with self.anilist_factory(self.cfg) as anilist:
                metadata = await anilist.lookup(ids.mal_id)
            write_json_atomic(paths.metadata_doc, metadata)

        print(Colors.info(f"Fetching manga: {ids.source_id}"))
        async with self.source_factory(self.cfg) as source:
            chapters = await source.discover(ids.source_id)

        save_title_ids(paths.source_doc, ids)
        print(Colors.success(f"Added {paths.root} with {len(chapters)} chapters available"))
        return len(chapters)

    async def run(self, ids: TitleIds) -> RunReport:
        """One mirror pass for a title. Any failure aborts before chapters.json is touched."""
        paths = self.paths(ids.mal_id)
        print(f"\n{Colors.title(f'Title {ids.mal_id}')} (source {ids.source_id})")

        async with self.source_factory(self.cfg) as source:
            chapters = await source.discover(ids.source_id)
            print(Colors.info(f"Chapters discovered: {len(chapters)}"))

            local = read_local_state(paths)
            missing = reconcile(chapters, local.declared)

            orphans = find_orphans(missing, local.on_disk)
            if orphans and self.cfg.recover_orphans:
                print(Colors.warning(f"Discarding partial chapters: {orphans}"))
                discard_orphans(paths, orphans)
                local.on_disk.difference_update(orphans)
            check_consistency(missing, local.on_disk)

            print(Colors.info(f"Chapters to fetch: {len(missing)}"))
            compiler = JobCompiler(source, paths, self.cfg.request_delay)
            jobs = await compiler.compile(chapters, missing)

        print(Colors.info(f"Page jobs: {len(jobs)}"))
        if jobs:
            await WorkerPool(self.cfg).run(jobs)

        records = MetadataWriter(paths).write(chapters, local.records)
        print(Colors.success(f"Wrote {paths.chapters_doc} ({len(records)} chapters)"))

        return RunReport(discovered=len(chapters), missing=len(missing), jobs=len(jobs))

    async def refresh_all(self) -> List[RunReport]:
        titles = find_titles(self.cfg.base_dir)
        if not titles:
            print(Colors.warning(f"No titles found under {self.cfg.base_dir}"))
            return []

        print(Colors.info(f"Titles to refresh: {len(titles)}"))
        return [await self.run(ids) for ids in titles]
