from __future__ import annotations

from dataclasses import replace

import pytest

from ruhverse.models import (
    Chapter,
    EditionPair,
    MalformedResponseError,
    OutOfRangeError,
    Verse,
    clamp_chapter_index,
    parse_edition,
    validate_chapter_index,
)


def test_clamp_chapter_index_bounds() -> None:
    assert clamp_chapter_index(-5) == 0
    assert clamp_chapter_index(0) == 0
    assert clamp_chapter_index(57) == 57
    assert clamp_chapter_index(400) == 113


@pytest.mark.parametrize("value", [-1, 114, True, "3"])
def test_validate_chapter_index_rejects(value) -> None:
    with pytest.raises(OutOfRangeError):
        validate_chapter_index(value)


def test_verse_from_payload_requires_fields() -> None:
    with pytest.raises(MalformedResponseError):
        Verse.from_payload({"number": 1, "text": "x"})


def test_chapter_payload_uses_upstream_keys(dataset: EditionPair) -> None:
    payload = dataset.arabic[1].as_payload()
    assert payload["englishName"] == "Surah-2"
    assert payload["englishNameTranslation"] == "Meaning 2"
    assert payload["revelationType"] == "Meccan"
    assert payload["ayahs"][0]["numberInSurah"] == 1


@pytest.mark.parametrize("payload", ["x", None, 7, ["number", 1]])
def test_chapter_from_payload_rejects_non_objects(payload) -> None:
    with pytest.raises(MalformedResponseError):
        Chapter.from_payload(payload)


def test_chapter_from_payload_ignores_extra_fields() -> None:
    chapter = Chapter.from_payload(
        {
            "number": 112,
            "name": "سُورَةُ الإِخۡلَاصِ",
            "englishName": "Al-Ikhlaas",
            "englishNameTranslation": "Sincerity",
            "revelationType": "Meccan",
            "ayahs": [
                {"number": 6222, "numberInSurah": 1, "text": "قُلۡ", "juz": 30, "sajda": False},
            ],
        }
    )
    assert chapter.number == 112
    assert chapter.ayahs[0].number == 6222
    assert chapter.is_loaded


def test_parse_edition_requires_all_chapters(dataset: EditionPair) -> None:
    payload = [chapter.as_payload() for chapter in dataset.arabic[:113]]
    with pytest.raises(MalformedResponseError):
        parse_edition(payload)


def test_parse_edition_rejects_out_of_order(dataset: EditionPair) -> None:
    payload = [chapter.as_payload() for chapter in dataset.arabic]
    payload[3], payload[4] = payload[4], payload[3]
    with pytest.raises(MalformedResponseError):
        parse_edition(payload)


def test_edition_pair_rejects_verse_count_mismatch(dataset: EditionPair) -> None:
    english = list(dataset.english)
    english[10] = replace(english[10], ayahs=english[10].ayahs[:-1])
    with pytest.raises(MalformedResponseError):
        EditionPair.from_editions(dataset.arabic, english)


def test_edition_pair_allows_unloaded_chapters(dataset: EditionPair) -> None:
    arabic = [chapter.without_verses() for chapter in dataset.arabic]
    english = [chapter.without_verses() for chapter in dataset.english]
    pair = EditionPair.from_editions(arabic, english)
    assert not pair.is_complete()
    assert dataset.is_complete()


def test_edition_pair_from_payload_requires_verses(dataset: EditionPair) -> None:
    payload = dataset.as_payload()
    stripped = {
        "quranArabic": [dict(entry, ayahs=[]) for entry in payload["quranArabic"]],
        "quranEnglish": payload["quranEnglish"],
    }
    with pytest.raises(MalformedResponseError):
        EditionPair.from_payload(stripped)


def test_edition_pair_payload_is_stable(dataset: EditionPair) -> None:
    first = dataset.as_payload()
    assert dataset.as_payload() is first
    assert len(first["quranArabic"]) == 114
    assert EditionPair.from_payload(first) == dataset


def test_chapter_lookup_validates_index(dataset: EditionPair) -> None:
    arabic, english = dataset.chapter(113)
    assert arabic.number == english.number == 114
    with pytest.raises(OutOfRangeError):
        dataset.chapter(114)
