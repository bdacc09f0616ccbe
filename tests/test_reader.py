from __future__ import annotations

import asyncio

from ruhverse.audio import AudioBackend, AudioController
from ruhverse.hydration import HydrationController, PageBootstrap, ReaderView
from ruhverse.reader import ReaderNavigator
from ruhverse.views import chapter_list, chapter_path, pagination_state


class ListView(ReaderView):
    def __init__(self) -> None:
        self.lists: list[list] = []
        self.paths: list[str] = []

    def show_chapter_list(self, items) -> None:
        self.lists.append(items)

    def replace_url(self, path: str) -> None:
        self.paths.append(path)


class NoSource:
    def fetch_site_dataset(self):
        raise AssertionError("no network expected")

    fetch_arabic = fetch_english = fetch_site_dataset


def _navigator(dataset, index: int, with_audio: bool = False):
    view = ListView()
    hydration = HydrationController(NoSource(), view)
    audio = AudioController(hydration, AudioBackend()) if with_audio else None
    asyncio.run(hydration.start(PageBootstrap(injected_index=index, legacy=dataset)))
    return ReaderNavigator(hydration, audio), hydration, view


def test_change_chapter_moves_within_bounds(dataset) -> None:
    navigator, hydration, view = _navigator(dataset, 0)
    assert asyncio.run(navigator.change_chapter(1))
    assert hydration.current_chapter_index == 1
    assert view.paths[-1] == "/quran/surah/2"
    assert asyncio.run(navigator.change_chapter(-1))
    assert view.paths[-1] == "/quran.html"
    assert not asyncio.run(navigator.change_chapter(-1))
    assert hydration.current_chapter_index == 0


def test_change_chapter_stops_at_last(dataset) -> None:
    navigator, hydration, _ = _navigator(dataset, 113)
    assert not asyncio.run(navigator.change_chapter(1))
    assert hydration.current_chapter_index == 113


def test_select_chapter_rejects_out_of_range(dataset) -> None:
    navigator, hydration, _ = _navigator(dataset, 3)
    assert not asyncio.run(navigator.select_chapter(114))
    assert not asyncio.run(navigator.select_chapter(-1))
    assert hydration.current_chapter_index == 3


def test_search_filters_chapter_list(dataset) -> None:
    navigator, _, view = _navigator(dataset, 0)
    items = navigator.search("meaning 11")
    assert [item.number for item in items] == [11, 110, 111, 112, 113, 114]
    assert view.lists[-1] is items
    assert navigator.search("") == view.lists[-1]
    assert len(view.lists[-1]) == 114
    assert navigator.search("no such chapter") == []


def test_play_chapter_switches_and_starts_audio(dataset) -> None:
    navigator, hydration, _ = _navigator(dataset, 0, with_audio=True)
    assert asyncio.run(navigator.play_chapter(6))
    assert hydration.current_chapter_index == 6
    assert navigator.audio.is_playing
    assert hydration.current_verse_index == 0


def test_play_chapter_without_audio(dataset) -> None:
    navigator, _, _ = _navigator(dataset, 0)
    assert not asyncio.run(navigator.play_chapter(2))


def test_chapter_list_marks_active_and_links(dataset) -> None:
    items = chapter_list(dataset.arabic, 9)
    assert len(items) == 114
    assert [item.index for item in items if item.active] == [9]
    assert items[9].href == "/quran/surah/10"
    assert items[9].label == "10. Surah-10"
    by_name = chapter_list(dataset.metadata(), 0, "سورة 57")
    assert [item.number for item in by_name] == [57]


def test_paths_and_pagination() -> None:
    assert chapter_path(0) == "/quran.html"
    assert chapter_path(113) == "/quran/surah/114"
    first = pagination_state(0)
    assert (first.current, first.has_previous, first.has_next) == (1, False, True)
    last = pagination_state(113)
    assert (last.current, last.total, last.has_next) == (114, 114, False)
