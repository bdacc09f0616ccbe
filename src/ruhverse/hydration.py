"""
Client-side reconciliation of the page bootstrap with the live reader state.

A page can arrive with a minimal bootstrap (metadata for every chapter plus
one populated chapter), with the legacy full dataset, or with nothing at all.
:class:`HydrationController` turns any of these into one pair of editions,
renders the requested chapter without touching the network when it can, and
completes the dataset in the background.

State only moves forward::

    EMPTY -> PARTIAL -> COMPLETE
    EMPTY -----------> COMPLETE
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Mapping
from urllib.parse import parse_qs, urlsplit

import requests
from bs4 import BeautifulSoup, Tag

from .models import (
    TOTAL_CHAPTERS,
    Chapter,
    ChapterMeta,
    EditionPair,
    MalformedResponseError,
    clamp_chapter_index,
    validate_chapter_index,
)
from .remote import QuranCloudClient, UpstreamFetchError, get_json
from .render import BOOTSTRAP_ELEMENT_ID, LEGACY_DATA_ELEMENT_ID
from .views import (
    ChapterListItem,
    ChapterView,
    ReaderState,
    chapter_list,
    chapter_path,
    render_chapter,
)

logger = logging.getLogger(__name__)

DATASET_ENDPOINT = "/api/quran-data"
FETCHING_MESSAGE = "Fetching Quran Data..."
LOADING_MESSAGE = "Loading Surah..."
START_FAILED_MESSAGE = "Failed to load data. Check your internet connection and refresh."
CHAPTER_FAILED_MESSAGE = "Unable to load Surah text right now. Check your connection and try again."

_SURAH_PATH_RE = re.compile(r"/quran/surah/([0-9]+)", re.IGNORECASE)
_INT_RE = re.compile(r"-?[0-9]+")


class HydrationState(enum.Enum):
    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(slots=True)
class PageBootstrap:
    injected_index: int | None = None
    surah_meta: list[ChapterMeta] | None = None
    initial_arabic: Chapter | None = None
    initial_english: Chapter | None = None
    legacy: EditionPair | None = None

    @property
    def mode(self) -> str:
        if self.surah_meta:
            return "minimal"
        if self.legacy is not None:
            return "legacy"
        return "absent"


def _parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def parse_bootstrap(payload: object) -> PageBootstrap:
    """Validate a minimal bootstrap payload (``surahMeta`` + one chapter)."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError("Bootstrap payload is not an object")
    raw_meta = payload.get("surahMeta")
    if not isinstance(raw_meta, list):
        raise MalformedResponseError("Bootstrap payload has no surahMeta list")
    metas = [ChapterMeta.from_payload(entry) for entry in raw_meta]
    if len(metas) != TOTAL_CHAPTERS:
        raise MalformedResponseError(
            f"Bootstrap lists {len(metas)} chapters, expected {TOTAL_CHAPTERS}"
        )
    for position, meta in enumerate(metas):
        if meta.number != position + 1:
            raise MalformedResponseError(f"Bootstrap metadata out of order at {position}")

    bootstrap = PageBootstrap(
        injected_index=_parse_int(payload.get("initialSurahIndex")),
        surah_meta=metas,
    )
    raw_ar = payload.get("initialSurahArabic")
    raw_en = payload.get("initialSurahEnglish")
    if raw_ar is None or raw_en is None:
        return bootstrap
    try:
        arabic = Chapter.from_payload(raw_ar)
        english = Chapter.from_payload(raw_en)
    except MalformedResponseError as exc:
        logger.warning("Ignoring malformed bootstrap chapter: %s", exc)
        return bootstrap
    expected = (
        clamp_chapter_index(bootstrap.injected_index) + 1
        if bootstrap.injected_index is not None
        else arabic.number
    )
    if (
        arabic.number != english.number
        or arabic.number != expected
        or not arabic.is_loaded
        or len(arabic.ayahs) != len(english.ayahs)
    ):
        logger.warning("Ignoring inconsistent bootstrap chapter %s", arabic.number)
        return bootstrap
    bootstrap.initial_arabic = arabic
    bootstrap.initial_english = english
    if bootstrap.injected_index is None:
        bootstrap.injected_index = arabic.number - 1
    return bootstrap


def _script_json(soup: BeautifulSoup, element_id: str) -> object | None:
    element = soup.find("script", id=element_id)
    if not isinstance(element, Tag):
        return None
    raw = element.string if element.string is not None else element.get_text()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("Embedded %s is not valid JSON: %s", element_id, exc)
        return None


def extract_bootstrap(document: str) -> PageBootstrap:
    """Read whatever startup data a rendered page carries."""
    soup = BeautifulSoup(document, "html.parser")
    injected: int | None = None
    app = soup.find(id="quran-app")
    if isinstance(app, Tag):
        raw_index = app.get("data-initial-surah-index")
        injected = _parse_int(raw_index if isinstance(raw_index, str) else None)

    payload = _script_json(soup, BOOTSTRAP_ELEMENT_ID)
    if payload is not None:
        try:
            bootstrap = parse_bootstrap(payload)
        except MalformedResponseError as exc:
            logger.warning("Ignoring malformed bootstrap: %s", exc)
        else:
            if bootstrap.injected_index is None:
                bootstrap.injected_index = injected
            return bootstrap

    legacy_payload = _script_json(soup, LEGACY_DATA_ELEMENT_ID)
    if legacy_payload is not None:
        try:
            legacy = EditionPair.from_payload(legacy_payload)
        except MalformedResponseError as exc:
            logger.warning("Ignoring malformed legacy dataset: %s", exc)
        else:
            return PageBootstrap(injected_index=injected, legacy=legacy)

    return PageBootstrap(injected_index=injected)


def resolve_initial_index(
    injected: int | None = None,
    path: str = "",
    query: str = "",
) -> int:
    """Injected index, then ``/quran/surah/N``, then ``?surah=N``, then chapter 1."""
    if isinstance(injected, int) and not isinstance(injected, bool):
        return clamp_chapter_index(injected)
    match = _SURAH_PATH_RE.search(path or "")
    if match:
        number = int(match.group(1))
        if 1 <= number <= TOTAL_CHAPTERS:
            return clamp_chapter_index(number - 1)
    values = parse_qs((query or "").lstrip("?")).get("surah")
    if values:
        number = _parse_int(values[0])
        if number is not None and 1 <= number <= TOTAL_CHAPTERS:
            return clamp_chapter_index(number - 1)
    return 0


def resolve_initial_index_from_url(url: str, injected: int | None = None) -> int:
    parts = urlsplit(url)
    return resolve_initial_index(injected, parts.path, parts.query)


class ReaderView:
    """Presentation adapter; the base class renders nothing."""

    def show_loading(self, message: str) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def show_chapter(self, view: ChapterView) -> None:
        pass

    def show_chapter_list(self, items: list[ChapterListItem]) -> None:
        pass

    def highlight_chapter(self, index: int) -> None:
        pass

    def replace_url(self, path: str) -> None:
        pass


class DatasetSource:
    """Where background completion gets the full dataset from."""

    def __init__(
        self,
        site_url: str | None = None,
        client: QuranCloudClient | None = None,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.site_url = site_url.rstrip("/") if site_url else None
        self.timeout = timeout
        self.client = client or QuranCloudClient(timeout=timeout)
        self._session = session or requests.Session()

    def fetch_site_dataset(self) -> EditionPair:
        if not self.site_url:
            raise UpstreamFetchError("No same-origin dataset endpoint configured")
        url = f"{self.site_url}{DATASET_ENDPOINT}"
        return EditionPair.from_payload(get_json(self._session, url, timeout=self.timeout))

    def fetch_arabic(self) -> list[Chapter]:
        return self.client.fetch_arabic()

    def fetch_english(self) -> list[Chapter]:
        return self.client.fetch_english()

    def close(self) -> None:
        self._session.close()
        self.client.close()


class HydrationController:
    def __init__(self, source: DatasetSource, view: ReaderView | None = None) -> None:
        self.source = source
        self.view = view or ReaderView()
        self._state = HydrationState.EMPTY
        self._arabic: list[Chapter] = []
        self._english: list[Chapter] = []
        self._chapter_index = 0
        self._verse_index = 0
        self._rendered_index: int | None = None
        self._completion: asyncio.Future[bool] | None = None
        self._chapter_listeners: list[Callable[[int, bool], None]] = []
        self.background_task: asyncio.Future[bool] | None = None

    # -- queries -------------------------------------------------------

    @property
    def state(self) -> HydrationState:
        return self._state

    @property
    def has_full_dataset(self) -> bool:
        return self._state is HydrationState.COMPLETE

    @property
    def current_chapter_index(self) -> int:
        return self._chapter_index

    @property
    def current_verse_index(self) -> int:
        return self._verse_index

    @property
    def arabic(self) -> tuple[Chapter, ...]:
        return tuple(self._arabic)

    @property
    def english(self) -> tuple[Chapter, ...]:
        return tuple(self._english)

    def current_chapter(self) -> tuple[Chapter, Chapter] | None:
        if not self.is_chapter_loaded(self._chapter_index):
            return None
        return self._arabic[self._chapter_index], self._english[self._chapter_index]

    def is_chapter_loaded(self, index: int) -> bool:
        if index < 0 or index >= len(self._arabic) or index >= len(self._english):
            return False
        return self._arabic[index].is_loaded and self._english[index].is_loaded

    def snapshot(self) -> ReaderState:
        return ReaderState(
            arabic=tuple(self._arabic),
            english=tuple(self._english),
            chapter_index=self._chapter_index,
            verse_index=self._verse_index,
            has_full_dataset=self.has_full_dataset,
        )

    def chapter_list(self, term: str = "") -> list[ChapterListItem]:
        return chapter_list(self._arabic, self._chapter_index, term)

    def add_chapter_listener(self, listener: Callable[[int, bool], None]) -> None:
        """``listener(index, keep_audio)`` runs whenever the current chapter changes."""
        self._chapter_listeners.append(listener)

    # -- commands ------------------------------------------------------

    async def start(
        self,
        page: PageBootstrap | None = None,
        *,
        path: str = "",
        query: str = "",
        background: bool = True,
    ) -> bool:
        """Hydrate from ``page`` and render the initial chapter.

        Returns ``False`` when nothing could be rendered. With a minimal
        bootstrap the background completion is scheduled only after the
        first render, and exposed as :attr:`background_task`.
        """
        if self._state is not HydrationState.EMPTY:
            raise RuntimeError("Hydration controller already started")
        page = page or PageBootstrap()
        self._chapter_index = resolve_initial_index(page.injected_index, path, query)

        if page.surah_meta:
            self._apply_bootstrap(page.surah_meta, page)
        elif page.legacy is not None:
            self._apply_full_dataset(page.legacy)
        else:
            self.view.show_loading(FETCHING_MESSAGE)
            if not await self.ensure_full_dataset():
                self.view.show_error(START_FAILED_MESSAGE)
                return False

        self.view.show_chapter_list(self.chapter_list())
        rendered = await self.load_chapter(self._chapter_index, force_reload=True)
        if background and self._state is HydrationState.PARTIAL:
            self.background_task = asyncio.ensure_future(self.ensure_full_dataset())
        return rendered

    async def ensure_full_dataset(self) -> bool:
        """Complete the dataset once; concurrent callers share one attempt.

        Failures are logged and reported as ``False``; the state is left as
        it was so a later navigation can try again.
        """
        if self._state is HydrationState.COMPLETE:
            return True
        if self._completion is None:
            completion = asyncio.ensure_future(self._complete_dataset())
            completion.add_done_callback(self._clear_completion)
            self._completion = completion
        return await asyncio.shield(self._completion)

    def _clear_completion(self, completion: asyncio.Future[bool]) -> None:
        if self._completion is completion:
            self._completion = None

    async def _complete_dataset(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            pair = await loop.run_in_executor(None, self.source.fetch_site_dataset)
        except (UpstreamFetchError, MalformedResponseError) as exc:
            logger.info("Dataset endpoint unavailable (%s); fetching editions directly", exc)
            try:
                arabic, english = await asyncio.gather(
                    loop.run_in_executor(None, self.source.fetch_arabic),
                    loop.run_in_executor(None, self.source.fetch_english),
                )
                pair = EditionPair.from_editions(arabic, english)
                if not pair.is_complete():
                    raise MalformedResponseError("Upstream editions are incomplete")
            except (UpstreamFetchError, MalformedResponseError) as exc:
                logger.warning("Background dataset completion failed: %s", exc)
                return False
        self._apply_full_dataset(pair)
        return True

    async def load_chapter(
        self,
        index: int,
        keep_audio: bool = False,
        force_reload: bool = False,
    ) -> bool:
        """Make ``index`` the current chapter and render it.

        Blocks on :meth:`ensure_full_dataset` when the chapter has no verses
        yet. On failure the previously rendered chapter stays in place and an
        inline error is shown.
        """
        validate_chapter_index(index)
        loaded = self.is_chapter_loaded(index)
        if (
            loaded
            and not force_reload
            and index == self._chapter_index
            and self._rendered_index == index
        ):
            self.view.highlight_chapter(index)
            return True

        if not loaded:
            self.view.show_loading(LOADING_MESSAGE)
            if not await self.ensure_full_dataset() or not self.is_chapter_loaded(index):
                logger.error("Unable to load chapter %s", index + 1)
                self.view.show_error(CHAPTER_FAILED_MESSAGE)
                return False

        self._chapter_index = index
        self._verse_index = 0
        for listener in self._chapter_listeners:
            listener(index, keep_audio)
        self.view.replace_url(chapter_path(index))
        self.view.highlight_chapter(index)
        self.view.show_chapter(render_chapter(self.snapshot()))
        self._rendered_index = index
        return True

    def select_verse(self, verse_index: int) -> bool:
        current = self.current_chapter()
        if current is None:
            return False
        if verse_index < 0 or verse_index >= len(current[0].ayahs):
            return False
        self._verse_index = verse_index
        return True

    # -- transitions ---------------------------------------------------

    def _apply_bootstrap(self, metas: list[ChapterMeta], page: PageBootstrap) -> None:
        self._arabic = [Chapter.placeholder(meta) for meta in metas]
        self._english = [Chapter.placeholder(meta) for meta in metas]
        if page.injected_index is not None:
            self._chapter_index = clamp_chapter_index(page.injected_index)
        if page.initial_arabic is not None and page.initial_english is not None:
            self._arabic[self._chapter_index] = page.initial_arabic
            self._english[self._chapter_index] = page.initial_english
        self._state = HydrationState.PARTIAL
        logger.debug("Hydrated partial bootstrap for chapter %s", self._chapter_index + 1)

    def _apply_full_dataset(self, pair: EditionPair) -> None:
        self._arabic = list(pair.arabic)
        self._english = list(pair.english)
        self._state = HydrationState.COMPLETE
        logger.debug("Full dataset loaded")
