from __future__ import annotations

BISMILLAH = "بِسْمِ اللَّهِ الرَّحْمَٰنِ الرَّحِيمِ"
# Spelling used by the uthmani edition (alef wasla).
BISMILLAH_UTHMANI = "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ"

# Al-Fatihah opens with the phrase as its first verse; At-Tawbah omits it.
_NO_HEADER_INDICES = frozenset({0, 8})


def shows_bismillah_header(chapter_index: int) -> bool:
    return chapter_index not in _NO_HEADER_INDICES


def display_verse_text(text: str, chapter_index: int, verse_index: int) -> str:
    """Return the verse text as displayed under a chapter's header."""
    if verse_index != 0 or not shows_bismillah_header(chapter_index):
        return text
    for phrase in (BISMILLAH, BISMILLAH_UTHMANI):
        if text.startswith(phrase):
            return text[len(phrase):].strip()
    return text
