from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .models import LAST_CHAPTER_INDEX, TOTAL_CHAPTERS, Chapter, ChapterMeta
from .text import BISMILLAH, display_verse_text, shows_bismillah_header

ROOT_PATH = "/quran.html"


def chapter_path(index: int) -> str:
    """Public path of a chapter; chapter 1 lives at the canonical root."""
    return ROOT_PATH if index == 0 else f"/quran/surah/{index + 1}"


@dataclass(slots=True, frozen=True)
class ReaderState:
    """Read-only snapshot of the reconciled editions and navigation state."""

    arabic: Sequence[Chapter]
    english: Sequence[Chapter]
    chapter_index: int
    verse_index: int
    has_full_dataset: bool


@dataclass(slots=True, frozen=True)
class VersePair:
    number: int
    number_in_surah: int
    arabic: str
    english: str
    active: bool = False


@dataclass(slots=True, frozen=True)
class PaginationState:
    current: int
    total: int
    has_previous: bool
    has_next: bool


@dataclass(slots=True, frozen=True)
class ChapterView:
    index: int
    title: str
    name: str
    english_name_translation: str
    bismillah: str | None
    verses: tuple[VersePair, ...]
    pagination: PaginationState
    path: str


@dataclass(slots=True, frozen=True)
class ChapterListItem:
    index: int
    number: int
    english_name: str
    english_name_translation: str
    name: str
    href: str
    active: bool

    @property
    def label(self) -> str:
        return f"{self.number}. {self.english_name}"


def pagination_state(index: int) -> PaginationState:
    return PaginationState(
        current=index + 1,
        total=TOTAL_CHAPTERS,
        has_previous=index > 0,
        has_next=index < LAST_CHAPTER_INDEX,
    )


def render_chapter(state: ReaderState) -> ChapterView:
    index = state.chapter_index
    arabic = state.arabic[index]
    english = state.english[index]
    verses: list[VersePair] = []
    for verse_index, verse in enumerate(arabic.ayahs):
        verses.append(
            VersePair(
                number=verse.number,
                number_in_surah=verse.number_in_surah,
                arabic=display_verse_text(verse.text, index, verse_index),
                english=english.ayahs[verse_index].text,
                active=verse_index == state.verse_index,
            )
        )
    return ChapterView(
        index=index,
        title=f"{arabic.number}. {arabic.english_name}",
        name=arabic.name,
        english_name_translation=arabic.english_name_translation,
        bismillah=BISMILLAH if shows_bismillah_header(index) else None,
        verses=tuple(verses),
        pagination=pagination_state(index),
        path=chapter_path(index),
    )


def _search_text(meta: ChapterMeta) -> str:
    return (
        f"{meta.number}. {meta.english_name} {meta.english_name_translation} {meta.name}"
    ).casefold()


def chapter_list(
    chapters: Sequence[Chapter | ChapterMeta],
    active_index: int,
    term: str = "",
) -> list[ChapterListItem]:
    needle = term.strip().casefold()
    items: list[ChapterListItem] = []
    for index, entry in enumerate(chapters):
        meta = entry.meta if isinstance(entry, Chapter) else entry
        if needle and needle not in _search_text(meta):
            continue
        items.append(
            ChapterListItem(
                index=index,
                number=meta.number,
                english_name=meta.english_name,
                english_name_translation=meta.english_name_translation,
                name=meta.name,
                href=f"/quran/surah/{meta.number}",
                active=index == active_index,
            )
        )
    return items
