from __future__ import annotations

import html
import json
import logging
import re
from typing import Mapping, Sequence

from .cache import DatasetCache
from .models import (
    LAST_CHAPTER_INDEX,
    TOTAL_CHAPTERS,
    Chapter,
    ChapterMeta,
    EditionPair,
    MalformedResponseError,
    validate_chapter_index,
)
from .remote import UpstreamFetchError
from .text import BISMILLAH, display_verse_text, shows_bismillah_header
from .views import chapter_path
from .web_assets import RUHVERSE_FAVICON_URL

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ruhverse.online"
CANONICAL_ROOT_PATH = "/quran.html"
BOOTSTRAP_ELEMENT_ID = "ssr-bootstrap"
LEGACY_DATA_ELEMENT_ID = "ssr-data"

DEFAULT_PAGE_TITLE = "Read Quran Online - RuhVerse"
DEFAULT_PAGE_DESCRIPTION = (
    "Read the Holy Quran online with translations, beautiful recitations, "
    "and a premium 3D interface on RuhVerse."
)
DEGRADED_HEADING = "The Holy Quran"
UNAVAILABLE_MESSAGE = (
    "Quran data is unavailable right now. Please check your connection and refresh."
)

QURAN_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>__PAGE_TITLE__</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="description" content="__PAGE_DESCRIPTION__">
  <link rel="canonical" href="__CANONICAL_URL__">
  <meta property="og:title" content="__PAGE_TITLE__">
  <meta property="og:description" content="__PAGE_DESCRIPTION__">
  <meta property="og:url" content="__CANONICAL_URL__">
  <link rel="icon" type="image/svg+xml" href="__FAVICON__">
  <link rel="stylesheet" href="/style.css">
</head>
<body class="quran-page-body">
  <aside id="sidebar" class="sidebar">
    <input id="surah-search" type="search" placeholder="Search Surah..." aria-label="Search Surah">
    <ul id="surah-list" class="surah-list">__SURAH_LIST__</ul>
  </aside>
  <main id="quran-app" data-initial-surah-index="__INITIAL_INDEX__">
    <header class="quran-header">
      <h1 id="current-surah-title">__CURRENT_SURAH_TITLE__</h1>
      <div class="view-controls">
        <button id="btn-arabic" class="active">Arabic</button>
        <button id="btn-trans">Translation</button>
        <button id="btn-audio">Listen</button>
      </div>
    </header>
    <section id="quran-text-container" class="quran-text-container">__QURAN_CONTENT__</section>
    <nav id="pagination-bottom" class="pagination">__PAGINATION__</nav>
  </main>
  <div id="audio-player-bar" class="audio-player-bar">
    <button id="audio-prev">Prev</button>
    <button id="audio-play-pause">Play</button>
    <button id="audio-next">Next</button>
    <span id="player-status"></span>
    <span id="player-ayah"></span>
    <button id="audio-close">Close</button>
  </div>
__SSR_DATA__
  <script src="/script.js" defer></script>
</body>
</html>
"""

_PLACEHOLDER_RE = re.compile(r"__([A-Z_]+)__")


def escape_html(value: object) -> str:
    return html.escape(str(value), quote=True)


def _fill_template(template: str, values: Mapping[str, str]) -> str:
    # Single pass, so inserted content is never rescanned for placeholders.
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def render_chapter_html(arabic: Chapter, english: Chapter, index: int) -> str:
    parts: list[str] = []
    if shows_bismillah_header(index):
        parts.append(f'<div class="bismillah-block">{BISMILLAH}</div>')
    for verse_index, verse in enumerate(arabic.ayahs):
        text = display_verse_text(verse.text, index, verse_index)
        translation = english.ayahs[verse_index].text
        parts.append(
            '<div class="verse-block">'
            f'<p class="ayah-arabic">{escape_html(text)} '
            f'<span class="verse-number">{verse.number_in_surah}</span></p>'
            f'<p class="ayah-translation">{escape_html(translation)}</p>'
            "</div>"
        )
    return "".join(parts)


def render_chapter_list_html(chapters: Sequence[ChapterMeta], active_index: int) -> str:
    items: list[str] = []
    for index, meta in enumerate(chapters):
        active = ' class="active"' if index == active_index else ""
        items.append(
            f"<li{active}>"
            f'<a href="/quran/surah/{meta.number}">'
            f'<span class="surah-label">{meta.number}. {escape_html(meta.english_name)}</span>'
            f'<span class="surah-translation">{escape_html(meta.english_name_translation)}</span>'
            f'<span class="arabic-name">{escape_html(meta.name)}</span>'
            "</a></li>"
        )
    return "".join(items)


def render_pagination_html(index: int) -> str:
    parts: list[str] = []
    if index > 0:
        parts.append(
            f'<a class="nav-pill prev-surah" href="{chapter_path(index - 1)}">&larr; Previous</a>'
        )
    parts.append(
        f'<div class="page-num-display">Surah <span class="current-idx">{index + 1}</span>'
        f" of {TOTAL_CHAPTERS}</div>"
    )
    if index < LAST_CHAPTER_INDEX:
        parts.append(
            f'<a class="nav-pill next-surah" href="{chapter_path(index + 1)}">Next &rarr;</a>'
        )
    return "".join(parts)


def build_bootstrap(pair: EditionPair, index: int) -> dict[str, object]:
    """Metadata for every chapter plus both editions of the requested one."""
    arabic, english = pair.chapter(index)
    return {
        "surahMeta": [meta.as_payload() for meta in pair.metadata()],
        "initialSurahIndex": index,
        "initialSurahArabic": arabic.as_payload(),
        "initialSurahEnglish": english.as_payload(),
    }


def _json_for_script(payload: object) -> str:
    encoded = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return encoded.replace("<", "\\u003c")


def render_bootstrap_script(payload: Mapping[str, object], index: int, *, legacy: bool = False) -> str:
    element_id = LEGACY_DATA_ELEMENT_ID if legacy else BOOTSTRAP_ELEMENT_ID
    global_name = "__SSR_DATA" if legacy else "__SSR_BOOTSTRAP"
    return (
        f'  <script type="application/json" id="{element_id}">{_json_for_script(payload)}</script>\n'
        "  <script>\n"
        f"window.{global_name} = JSON.parse("
        f"document.getElementById('{element_id}').textContent);\n"
        f"window.__INITIAL_SURAH_INDEX = {int(index)};\n"
        "  </script>"
    )


def render_quran_page(
    pair: EditionPair,
    index: int,
    canonical_path: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    legacy_bootstrap: bool = False,
) -> str:
    validate_chapter_index(index)
    arabic, english = pair.chapter(index)
    if not arabic.is_loaded or not english.is_loaded:
        raise MalformedResponseError(f"Chapter {arabic.number} has no verses to render")
    page_title = f"Surah {arabic.english_name} ({arabic.number}) - Read Quran Online - RuhVerse"
    page_description = (
        f"Read Surah {arabic.english_name} ({arabic.number}) with Arabic text "
        "and English translation on RuhVerse."
    )
    if legacy_bootstrap:
        script = render_bootstrap_script(pair.as_payload(), index, legacy=True)
    else:
        script = render_bootstrap_script(build_bootstrap(pair, index), index)
    return _fill_template(
        QURAN_HTML,
        {
            "PAGE_TITLE": escape_html(page_title),
            "PAGE_DESCRIPTION": escape_html(page_description),
            "CANONICAL_URL": escape_html(f"{base_url.rstrip('/')}{canonical_path}"),
            "FAVICON": RUHVERSE_FAVICON_URL,
            "SURAH_LIST": render_chapter_list_html(pair.metadata(), index),
            "INITIAL_INDEX": str(index),
            "CURRENT_SURAH_TITLE": escape_html(f"{arabic.number}. {arabic.english_name}"),
            "QURAN_CONTENT": render_chapter_html(arabic, english, index),
            "PAGINATION": render_pagination_html(index),
            "SSR_DATA": script,
        },
    )


def render_degraded_page(canonical_path: str, *, base_url: str = DEFAULT_BASE_URL) -> str:
    return _fill_template(
        QURAN_HTML,
        {
            "PAGE_TITLE": escape_html(DEFAULT_PAGE_TITLE),
            "PAGE_DESCRIPTION": escape_html(DEFAULT_PAGE_DESCRIPTION),
            "CANONICAL_URL": escape_html(f"{base_url.rstrip('/')}{canonical_path}"),
            "FAVICON": RUHVERSE_FAVICON_URL,
            "SURAH_LIST": "",
            "INITIAL_INDEX": "",
            "CURRENT_SURAH_TITLE": escape_html(DEGRADED_HEADING),
            "QURAN_CONTENT": f'<div class="loading-spinner data-unavailable">{escape_html(UNAVAILABLE_MESSAGE)}</div>',
            "PAGINATION": "",
            "SSR_DATA": "",
        },
    )


class PageRenderer:
    def __init__(
        self,
        cache: DatasetCache,
        base_url: str = DEFAULT_BASE_URL,
        *,
        legacy_bootstrap: bool = False,
        serve_stale: bool = True,
    ) -> None:
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.legacy_bootstrap = legacy_bootstrap
        self.serve_stale = serve_stale

    def dataset(self) -> EditionPair:
        """Cached dataset, falling back to a stale copy when allowed."""
        try:
            return self.cache.get_full_dataset()
        except (UpstreamFetchError, MalformedResponseError):
            stale = self.cache.peek() if self.serve_stale else None
            if stale is None:
                raise
            logger.warning("Serving stale scripture data after upstream failure")
            return stale

    def render(self, chapter_index: int, request_path: str) -> str:
        validate_chapter_index(chapter_index)
        try:
            pair = self.dataset()
            return render_quran_page(
                pair,
                chapter_index,
                request_path,
                base_url=self.base_url,
                legacy_bootstrap=self.legacy_bootstrap,
            )
        except (UpstreamFetchError, MalformedResponseError) as exc:
            logger.error("SSR fetch failed, serving degraded page for %s: %s", request_path, exc)
            return render_degraded_page(request_path, base_url=self.base_url)
