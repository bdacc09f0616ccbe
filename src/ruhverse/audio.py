from __future__ import annotations

import logging

from .hydration import HydrationController
from .models import LAST_CHAPTER_INDEX, Verse

logger = logging.getLogger(__name__)

AUDIO_CDN_BASE = "https://cdn.alquran.cloud/media/audio/ayah"
DEFAULT_RECITER = "ar.alafasy"


def verse_audio_url(verse: Verse, reciter: str = DEFAULT_RECITER) -> str:
    # Addressed by the global verse number, not the position in the chapter.
    return f"{AUDIO_CDN_BASE}/{reciter}/{verse.number}"


class AudioBackend:
    """Player adapter; the base class plays nothing."""

    def load(self, url: str) -> None:
        pass

    def play(self) -> None:
        pass

    def pause(self) -> None:
        pass

    def stop(self) -> None:
        pass


class AudioController:
    """
    Verse-by-verse recitation of the current chapter.

    Playback position lives in the hydration controller; this class only
    drives the backend and asks the controller to move.
    """

    def __init__(
        self,
        hydration: HydrationController,
        backend: AudioBackend | None = None,
        *,
        reciter: str = DEFAULT_RECITER,
    ) -> None:
        self.hydration = hydration
        self.backend = backend or AudioBackend()
        self.reciter = reciter
        self.is_playing = False
        self.is_active = False
        self.current_url: str | None = None
        hydration.add_chapter_listener(self._on_chapter_change)

    @property
    def verse_index(self) -> int:
        return self.hydration.current_verse_index

    def _verse_count(self) -> int:
        current = self.hydration.current_chapter()
        return len(current[0].ayahs) if current is not None else 0

    def status(self) -> tuple[str, str]:
        current = self.hydration.current_chapter()
        if current is None:
            return "", ""
        chapter = current[0]
        return (
            f"Reciting: {chapter.english_name}",
            f"Verse {self.verse_index + 1} of {len(chapter.ayahs)}",
        )

    def play_verse(self, verse_index: int) -> bool:
        current = self.hydration.current_chapter()
        if current is None or not self.hydration.select_verse(verse_index):
            return False
        verse = current[0].ayahs[verse_index]
        self.current_url = verse_audio_url(verse, self.reciter)
        self.backend.load(self.current_url)
        self.backend.play()
        self.is_playing = True
        self.is_active = True
        logger.debug("Playing %s", self.current_url)
        return True

    def toggle(self) -> None:
        if not self.is_active:
            self.play_verse(0)
            return
        if self.is_playing:
            self.backend.pause()
            self.is_playing = False
        else:
            self.backend.play()
            self.is_playing = True

    def stop(self) -> None:
        self.backend.stop()
        self.is_playing = False
        self.is_active = False
        self.current_url = None

    def next_verse(self) -> bool:
        if self.verse_index >= self._verse_count() - 1:
            return False
        return self.play_verse(self.verse_index + 1)

    def previous_verse(self) -> bool:
        if self.verse_index <= 0:
            return False
        return self.play_verse(self.verse_index - 1)

    async def on_ended(self) -> None:
        """Advance after the backend finished the current verse."""
        if self.verse_index < self._verse_count() - 1:
            self.play_verse(self.verse_index + 1)
            return
        chapter_index = self.hydration.current_chapter_index
        if chapter_index < LAST_CHAPTER_INDEX:
            loaded = await self.hydration.load_chapter(
                chapter_index + 1, keep_audio=True, force_reload=True
            )
            if loaded:
                self.play_verse(0)
            else:
                self.stop()
            return
        self.stop()

    def _on_chapter_change(self, index: int, keep_audio: bool) -> None:
        if self.is_active and not keep_audio:
            self.stop()
