import shutil
from typing import Iterable, List, Set

from errors import ConsistencyViolation, LocalIOFailure
from models import ChapterDescriptor
from state import TitlePaths


def reconcile(remote: Iterable[ChapterDescriptor], declared: Set[int]) -> List[int]:
    """Indices present remotely but without a record, ascending.

    Exact index match only. Declared chapters that vanished upstream are
    left alone.
    """
    return sorted({c.index for c in remote} - set(declared))


def find_orphans(missing: Iterable[int], on_disk: Set[int]) -> List[int]:
    return sorted(set(missing) & set(on_disk))


def check_consistency(missing: Iterable[int], on_disk: Set[int]) -> None:
    """A chapter about to be downloaded must not have a directory yet."""
    orphans = find_orphans(missing, on_disk)
    if orphans:
        raise ConsistencyViolation(orphans)


def discard_orphans(paths: TitlePaths, orphans: Iterable[int]) -> List[int]:
    removed = []
    for index in orphans:
        try:
            shutil.rmtree(paths.chapter_dir(index))
        except OSError as e:
            raise LocalIOFailure(f"cannot remove {paths.chapter_dir(index)}: {e}") from e
        removed.append(index)
    return removed
