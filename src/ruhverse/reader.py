from __future__ import annotations

from .audio import AudioController
from .hydration import HydrationController
from .models import LAST_CHAPTER_INDEX
from .views import ChapterListItem


class ReaderNavigator:
    """Pagination, chapter-list and search commands for a presentation layer."""

    def __init__(self, hydration: HydrationController, audio: AudioController | None = None) -> None:
        self.hydration = hydration
        self.audio = audio
        self.search_term = ""

    async def select_chapter(self, index: int) -> bool:
        if index < 0 or index > LAST_CHAPTER_INDEX:
            return False
        return await self.hydration.load_chapter(index)

    async def change_chapter(self, delta: int) -> bool:
        return await self.select_chapter(self.hydration.current_chapter_index + delta)

    async def play_chapter(self, index: int) -> bool:
        if self.audio is None:
            return False
        if index != self.hydration.current_chapter_index:
            if not await self.select_chapter(index):
                return False
        return self.audio.play_verse(0)

    def search(self, term: str) -> list[ChapterListItem]:
        self.search_term = term
        items = self.hydration.chapter_list(term)
        self.hydration.view.show_chapter_list(items)
        return items
