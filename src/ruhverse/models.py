from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

TOTAL_CHAPTERS = 114
LAST_CHAPTER_INDEX = TOTAL_CHAPTERS - 1


class MalformedResponseError(ValueError):
    """Raised when scripture data is missing expected fields or is misaligned."""


class OutOfRangeError(IndexError):
    """Raised when a chapter index falls outside 0..113."""


def clamp_chapter_index(index: int) -> int:
    return min(LAST_CHAPTER_INDEX, max(0, int(index)))


def validate_chapter_index(index: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise OutOfRangeError(f"Chapter index must be an integer, got {index!r}")
    if index < 0 or index > LAST_CHAPTER_INDEX:
        raise OutOfRangeError(
            f"Chapter index {index} outside 0..{LAST_CHAPTER_INDEX}"
        )
    return index


def _require(payload: Mapping[str, object], key: str, kind: type | tuple[type, ...]) -> object:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, kind):
        raise MalformedResponseError(f"Field {key!r} missing or invalid: {value!r}")
    return value


@dataclass(slots=True, frozen=True)
class Verse:
    number: int
    number_in_surah: int
    text: str

    def as_payload(self) -> dict[str, object]:
        return {
            "number": self.number,
            "numberInSurah": self.number_in_surah,
            "text": self.text,
        }

    @classmethod
    def from_payload(cls, payload: object) -> "Verse":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(f"Verse entry is not an object: {payload!r}")
        return cls(
            number=int(_require(payload, "number", int)),
            number_in_surah=int(_require(payload, "numberInSurah", int)),
            text=str(_require(payload, "text", str)),
        )


@dataclass(slots=True, frozen=True)
class ChapterMeta:
    number: int
    name: str
    english_name: str
    english_name_translation: str

    @property
    def index(self) -> int:
        return self.number - 1

    def as_payload(self) -> dict[str, object]:
        return {
            "number": self.number,
            "name": self.name,
            "englishName": self.english_name,
            "englishNameTranslation": self.english_name_translation,
        }

    @classmethod
    def from_payload(cls, payload: object) -> "ChapterMeta":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(f"Chapter entry is not an object: {payload!r}")
        number = int(_require(payload, "number", int))
        if number < 1 or number > TOTAL_CHAPTERS:
            raise MalformedResponseError(f"Chapter number {number} outside 1..{TOTAL_CHAPTERS}")
        return cls(
            number=number,
            name=str(_require(payload, "name", str)),
            english_name=str(_require(payload, "englishName", str)),
            english_name_translation=str(_require(payload, "englishNameTranslation", str)),
        )


@dataclass(slots=True, frozen=True)
class Chapter:
    """One chapter in one language edition; ``ayahs`` is empty until loaded."""

    meta: ChapterMeta
    ayahs: tuple[Verse, ...] = ()
    revelation_type: str | None = None

    @property
    def number(self) -> int:
        return self.meta.number

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def english_name(self) -> str:
        return self.meta.english_name

    @property
    def english_name_translation(self) -> str:
        return self.meta.english_name_translation

    @property
    def is_loaded(self) -> bool:
        return bool(self.ayahs)

    def without_verses(self) -> "Chapter":
        return replace(self, ayahs=())

    def as_payload(self) -> dict[str, object]:
        payload = self.meta.as_payload()
        if self.revelation_type is not None:
            payload["revelationType"] = self.revelation_type
        payload["ayahs"] = [verse.as_payload() for verse in self.ayahs]
        return payload

    @classmethod
    def from_payload(cls, payload: object) -> "Chapter":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(f"Chapter entry is not an object: {payload!r}")
        meta = ChapterMeta.from_payload(payload)
        raw_ayahs = payload.get("ayahs", [])
        if not isinstance(raw_ayahs, list):
            raise MalformedResponseError(f"Chapter {meta.number} has no verse list")
        revelation = payload.get("revelationType")
        return cls(
            meta=meta,
            ayahs=tuple(Verse.from_payload(entry) for entry in raw_ayahs),
            revelation_type=revelation if isinstance(revelation, str) else None,
        )

    @classmethod
    def placeholder(cls, meta: ChapterMeta) -> "Chapter":
        return cls(meta=meta)


def parse_edition(payload: object) -> list[Chapter]:
    if not isinstance(payload, list):
        raise MalformedResponseError("Edition payload is not a list of chapters")
    chapters = [Chapter.from_payload(entry) for entry in payload]
    if len(chapters) != TOTAL_CHAPTERS:
        raise MalformedResponseError(
            f"Edition has {len(chapters)} chapters, expected {TOTAL_CHAPTERS}"
        )
    for position, chapter in enumerate(chapters):
        if chapter.number != position + 1:
            raise MalformedResponseError(
                f"Chapter at position {position} is numbered {chapter.number}"
            )
    return chapters


@dataclass(slots=True, frozen=True)
class EditionPair:
    """Arabic and English editions, index-aligned by chapter and by verse."""

    arabic: tuple[Chapter, ...]
    english: tuple[Chapter, ...]
    _payload: dict[str, object] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.arabic) != len(self.english):
            raise MalformedResponseError(
                f"Edition sizes differ: ar={len(self.arabic)} en={len(self.english)}"
            )
        for ar, en in zip(self.arabic, self.english):
            if ar.number != en.number:
                raise MalformedResponseError(
                    f"Chapter numbers misaligned: ar={ar.number} en={en.number}"
                )
            if ar.is_loaded and en.is_loaded and len(ar.ayahs) != len(en.ayahs):
                raise MalformedResponseError(
                    f"Chapter {ar.number} verse counts differ: "
                    f"ar={len(ar.ayahs)} en={len(en.ayahs)}"
                )

    @classmethod
    def from_editions(
        cls, arabic: Iterable[Chapter], english: Iterable[Chapter]
    ) -> "EditionPair":
        return cls(arabic=tuple(arabic), english=tuple(english))

    @classmethod
    def from_payload(cls, payload: object) -> "EditionPair":
        if not isinstance(payload, Mapping):
            raise MalformedResponseError("Dataset payload is not an object")
        pair = cls.from_editions(
            parse_edition(payload.get("quranArabic")),
            parse_edition(payload.get("quranEnglish")),
        )
        for ar, en in zip(pair.arabic, pair.english):
            if not ar.is_loaded or not en.is_loaded:
                raise MalformedResponseError(f"Chapter {ar.number} has no verses")
        return pair

    def as_payload(self) -> dict[str, object]:
        # Frozen dataclass: the cached payload is filled once per instance.
        if self._payload is None:
            payload = {
                "quranArabic": [chapter.as_payload() for chapter in self.arabic],
                "quranEnglish": [chapter.as_payload() for chapter in self.english],
            }
            object.__setattr__(self, "_payload", payload)
        return self._payload  # type: ignore[return-value]

    def metadata(self) -> list[ChapterMeta]:
        return [chapter.meta for chapter in self.arabic]

    def chapter(self, index: int) -> tuple[Chapter, Chapter]:
        validate_chapter_index(index)
        return self.arabic[index], self.english[index]

    def is_complete(self) -> bool:
        return len(self.arabic) == TOTAL_CHAPTERS and all(
            ar.is_loaded and en.is_loaded for ar, en in zip(self.arabic, self.english)
        )
