from pathlib import Path
from typing import Dict, List, Sequence

from models import ChapterDescriptor, ChapterRecord
from state import TitlePaths, save_records


def page_files(chapter_dir: Path) -> List[Path]:
    """Page files of a chapter ordered by page position ("10" after "2")."""
    if not chapter_dir.is_dir():
        return []

    pages = [
        p for p in chapter_dir.iterdir()
        if p.is_file() and p.stem.isdecimal() and p.suffix
    ]
    return sorted(pages, key=lambda p: int(p.stem))


class MetadataWriter:
    """Rewrites chapters.json from the fetched catalog and the files on disk."""

    def __init__(self, paths: TitlePaths):
        self.paths = paths

    def build_records(self, chapters: Sequence[ChapterDescriptor],
                      previous: Dict[int, ChapterRecord]) -> List[ChapterRecord]:
        records: Dict[int, ChapterRecord] = {}

        for chapter in chapters:
            count = len(page_files(self.paths.chapter_dir(chapter.index)))
            records[chapter.index] = ChapterRecord(chapter.index, chapter.display_name, count)

        # chapters gone upstream keep their record, local files are never dropped
        for index, old in previous.items():
            if index not in records:
                count = len(page_files(self.paths.chapter_dir(index)))
                records[index] = ChapterRecord(index, old.display_name, count)

        return [records[i] for i in sorted(records)]

    def write(self, chapters: Sequence[ChapterDescriptor],
              previous: Dict[int, ChapterRecord]) -> List[ChapterRecord]:
        records = self.build_records(chapters, previous)
        save_records(self.paths.chapters_doc, records)
        return records
