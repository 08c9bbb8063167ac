import json
import os
from pathlib import Path
from typing import Dict, Set, List, Iterable

from errors import MalformedState, LocalIOFailure
from models import ChapterRecord, LocalState, TitleIds

CHAPTERS_DIR = "chapters"
CHAPTERS_DOC = "chapters.json"
SOURCE_DOC = "source.json"
METADATA_DOC = "metadata.json"
NAME_SIDECAR = "name.txt"


class TitlePaths:
    def __init__(self, root: Path):
        self.root = Path(root)

    @classmethod
    def for_title(cls, base_dir: Path, mal_id: int) -> "TitlePaths":
        return cls(Path(base_dir) / str(mal_id))

    @property
    def chapters_dir(self) -> Path:
        return self.root / CHAPTERS_DIR

    @property
    def chapters_doc(self) -> Path:
        return self.root / CHAPTERS_DOC

    @property
    def source_doc(self) -> Path:
        return self.root / SOURCE_DOC

    @property
    def metadata_doc(self) -> Path:
        return self.root / METADATA_DOC

    def chapter_dir(self, index: int) -> Path:
        return self.chapters_dir / str(index)


def write_json_atomic(path: Path, obj) -> None:
    """Write *obj* as pretty JSON to a temporary sibling and rename it over *path*."""
    text = json.dumps(obj, ensure_ascii=False, indent=2) + "\n"
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise LocalIOFailure(f"cannot write {path}: {e}") from e


def _parse_record(item, path: Path) -> ChapterRecord:
    if not isinstance(item, dict):
        raise MalformedState(f"{path}: chapter entry is not an object: {item!r}")

    index = item.get("index")
    name = item.get("name")
    page_count = item.get("page_count")

    if isinstance(index, bool) or not isinstance(index, int) or index < 1:
        raise MalformedState(f"{path}: bad chapter index {index!r}")
    if not isinstance(name, str):
        raise MalformedState(f"{path}: chapter {index} has no name")
    if isinstance(page_count, bool) or not isinstance(page_count, int) or page_count < 0:
        raise MalformedState(f"{path}: chapter {index} has bad page_count {page_count!r}")

    return ChapterRecord(index=index, display_name=name, page_count=page_count)


def load_records(path: Path) -> Dict[int, ChapterRecord]:
    """Parse the chapter-index document. A missing file means no records."""
    if not path.is_file():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedState(f"{path}: {e}") from e

    if not isinstance(data, list):
        raise MalformedState(f"{path}: expected a list of chapters")

    records: Dict[int, ChapterRecord] = {}
    for item in data:
        record = _parse_record(item, path)
        if record.index in records:
            raise MalformedState(f"{path}: chapter {record.index} listed twice")
        records[record.index] = record

    return records


def save_records(path: Path, records: Iterable[ChapterRecord]) -> None:
    ordered = sorted(records, key=lambda r: r.index)
    write_json_atomic(path, [r.to_dict() for r in ordered])


def chapter_dirs_on_disk(chapters_dir: Path) -> Set[int]:
    if not chapters_dir.is_dir():
        return set()

    found = set()
    for entry in chapters_dir.iterdir():
        if entry.is_dir() and entry.name.isdecimal():
            found.add(int(entry.name))
    return found


def read_local_state(paths: TitlePaths) -> LocalState:
    """Declared records and chapter directories of one title. No network I/O."""
    return LocalState(
        records=load_records(paths.chapters_doc),
        on_disk=chapter_dirs_on_disk(paths.chapters_dir),
        document_exists=paths.chapters_doc.is_file(),
    )


def load_title_ids(path: Path) -> TitleIds:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return TitleIds(mal_id=int(data["mal_id"]), source_id=int(data["source_id"]))
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise MalformedState(f"{path}: {e}") from e


def save_title_ids(path: Path, ids: TitleIds) -> None:
    write_json_atomic(path, {"mal_id": ids.mal_id, "source_id": ids.source_id})


def find_titles(base_dir: Path) -> List[TitleIds]:
    """Every added title under *base_dir*, ordered by directory name."""
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        return []

    titles = []
    for entry in sorted(base_dir.iterdir(), key=lambda p: p.name):
        source = entry / SOURCE_DOC
        if entry.is_dir() and source.is_file():
            titles.append(load_title_ids(source))
    return titles
