import json

import pytest

from errors import MalformedState
from models import ChapterRecord, TitleIds
from state import (
    TitlePaths, load_records, save_records, chapter_dirs_on_disk,
    read_local_state, find_titles, save_title_ids, load_title_ids,
)


def test_missing_document_means_no_records(tmp_path):
    paths = TitlePaths(tmp_path / "1")
    local = read_local_state(paths)
    assert local.records == {}
    assert local.on_disk == set()
    assert not local.document_exists


def test_load_records(tmp_path):
    doc = tmp_path / "chapters.json"
    doc.write_text(json.dumps([
        {"index": 2, "name": "Chapter 2", "page_count": 18},
        {"index": 1, "name": "Chapter 1", "page_count": 20},
    ]))
    records = load_records(doc)
    assert records == {
        1: ChapterRecord(1, "Chapter 1", 20),
        2: ChapterRecord(2, "Chapter 2", 18),
    }


@pytest.mark.parametrize("content", [
    "not json",
    '{"index": 1}',
    '[{"index": 0, "name": "x", "page_count": 1}]',
    '[{"index": "1", "name": "x", "page_count": 1}]',
    '[{"index": 1, "page_count": 1}]',
    '[{"index": 1, "name": "x", "page_count": -1}]',
    '[{"index": 1, "name": "x", "page_count": 1}, {"index": 1, "name": "y", "page_count": 2}]',
    '[3]',
])
def test_malformed_document(tmp_path, content):
    doc = tmp_path / "chapters.json"
    doc.write_text(content)
    with pytest.raises(MalformedState):
        load_records(doc)


def test_save_records_is_sorted_and_stable(tmp_path):
    doc = tmp_path / "chapters.json"
    records = [ChapterRecord(2, "Two", 3), ChapterRecord(1, "Один", 5)]

    save_records(doc, records)
    first = doc.read_bytes()
    save_records(doc, reversed(records))

    assert doc.read_bytes() == first
    assert json.loads(first) == [
        {"index": 1, "name": "Один", "page_count": 5},
        {"index": 2, "name": "Two", "page_count": 3},
    ]
    assert not (tmp_path / ".chapters.json.tmp").exists()


def test_chapter_dirs_on_disk(tmp_path):
    chapters = tmp_path / "chapters"
    for name in ("1", "2", "10", "notes"):
        (chapters / name).mkdir(parents=True)
    (chapters / "3").write_text("not a directory")

    assert chapter_dirs_on_disk(chapters) == {1, 2, 10}
    assert chapter_dirs_on_disk(tmp_path / "absent") == set()


def test_find_titles(tmp_path):
    save_title_ids(TitlePaths(tmp_path / "21").source_doc, TitleIds(21, 300))
    save_title_ids(TitlePaths(tmp_path / "13").source_doc, TitleIds(13, 100))
    (tmp_path / "stray").mkdir()

    assert find_titles(tmp_path) == [TitleIds(13, 100), TitleIds(21, 300)]
    assert find_titles(tmp_path / "nothing-here") == []


def test_broken_source_document(tmp_path):
    path = tmp_path / "source.json"
    path.write_text('{"mal_id": 1}')
    with pytest.raises(MalformedState):
        load_title_ids(path)


def test_non_ascii_digit_directory_is_ignored(tmp_path):
    chapters = tmp_path / "chapters"
    for name in ("4", "²", "1²"):
        (chapters / name).mkdir(parents=True)

    assert chapter_dirs_on_disk(chapters) == {4}
