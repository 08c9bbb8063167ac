from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Set


@dataclass(frozen=True)
class ChapterDescriptor:
    index: int
    display_name: str
    source_locator: str


@dataclass(frozen=True)
class ChapterRecord:
    index: int
    display_name: str
    page_count: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "index": self.index,
            "name": self.display_name,
            "page_count": self.page_count,
        }


@dataclass(frozen=True)
class PageJob:
    referer: str
    page_locator: str
    # no extension yet, the worker appends it from the response media type
    destination: Path


@dataclass
class LocalState:
    records: Dict[int, ChapterRecord] = field(default_factory=dict)
    on_disk: Set[int] = field(default_factory=set)
    document_exists: bool = False

    @property
    def declared(self) -> Set[int]:
        return set(self.records)


@dataclass(frozen=True)
class TitleIds:
    mal_id: int
    source_id: int


@dataclass(frozen=True)
class SearchResult:
    id: int
    name: str


@dataclass(frozen=True)
class RunReport:
    discovered: int
    missing: int
    jobs: int
