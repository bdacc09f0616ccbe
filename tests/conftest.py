from __future__ import annotations

import pytest

from ruhverse.models import TOTAL_CHAPTERS, Chapter, ChapterMeta, EditionPair, Verse
from ruhverse.text import BISMILLAH


def _arabic_text(chapter_index: int, verse_index: int) -> str:
    body = f"نص {chapter_index + 1}:{verse_index + 1}"
    if verse_index != 0:
        return body
    if chapter_index == 0:
        return BISMILLAH
    if chapter_index == 8:
        return body
    return f"{BISMILLAH} {body}"


def build_dataset(verse_counts: dict[int, int] | None = None) -> EditionPair:
    """114 small chapters with globally numbered verses."""
    verse_counts = verse_counts or {}
    arabic: list[Chapter] = []
    english: list[Chapter] = []
    global_number = 1
    for index in range(TOTAL_CHAPTERS):
        meta = ChapterMeta(
            number=index + 1,
            name=f"سورة {index + 1}",
            english_name=f"Surah-{index + 1}",
            english_name_translation=f"Meaning {index + 1}",
        )
        count = verse_counts.get(index, 3 + index % 4)
        ar_verses: list[Verse] = []
        en_verses: list[Verse] = []
        for verse_index in range(count):
            ar_verses.append(Verse(global_number, verse_index + 1, _arabic_text(index, verse_index)))
            en_verses.append(Verse(global_number, verse_index + 1, f"Verse {index + 1}:{verse_index + 1}"))
            global_number += 1
        arabic.append(Chapter(meta=meta, ayahs=tuple(ar_verses), revelation_type="Meccan"))
        english.append(Chapter(meta=meta, ayahs=tuple(en_verses), revelation_type="Meccan"))
    return EditionPair.from_editions(arabic, english)


def upstream_payload(chapters) -> dict[str, object]:
    return {
        "code": 200,
        "status": "OK",
        "data": {"surahs": [chapter.as_payload() for chapter in chapters]},
    }


@pytest.fixture
def dataset() -> EditionPair:
    return build_dataset()


@pytest.fixture
def make_dataset():
    return build_dataset


@pytest.fixture
def make_upstream_payload():
    return upstream_payload
