from __future__ import annotations

import argparse
import asyncio
import functools
import sys
from importlib import metadata
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import requests
import tomllib
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .hydration import (
    DatasetSource,
    HydrationController,
    PageBootstrap,
    ReaderView,
    extract_bootstrap,
)
from .logging_utils import build_uvicorn_log_config, set_debug_logging
from .models import TOTAL_CHAPTERS
from .reader import ReaderNavigator
from .views import ChapterListItem, ChapterView
from .web import WebConfig, create_app

DEFAULT_READ_URL = "http://127.0.0.1:3000/quran.html"
READ_PROMPT = r"\[n]ext, \[p]rev, chapter number, /search, \[q]uit"


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("ruhverse")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"ruhverse {__version__}",
    )


def _add_debug_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug messages from ruhverse modules.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="RuhVerse: server-rendered Quran reader. Use `ruhverse web` or `ruhverse read`.",
    )
    _add_version_flag(ap)
    ap.add_argument("command", nargs="?", choices=["web", "read"])
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    defaults = WebConfig.from_env()
    ap = argparse.ArgumentParser(
        description="Serve the server-rendered Quran pages and the dataset API.",
    )
    _add_version_flag(ap)
    ap.add_argument("--host", default=defaults.host, help="Interface to bind (default: %(default)s).")
    ap.add_argument(
        "--port",
        type=int,
        default=defaults.port,
        help="Port to listen on (default: $PORT or %(default)s).",
    )
    ap.add_argument(
        "--base-url",
        default=defaults.base_url,
        help="Public base URL used for canonical links (default: $PUBLIC_BASE_URL or %(default)s).",
    )
    ap.add_argument(
        "--cache-ttl",
        type=float,
        default=defaults.cache_ttl,
        help="Seconds to keep the scripture dataset cached (default: %(default)s).",
    )
    ap.add_argument(
        "--legacy-bootstrap",
        action="store_true",
        help="Embed the full dataset in every page instead of the minimal bootstrap.",
    )
    ap.add_argument(
        "--no-stale",
        action="store_true",
        help="Do not serve an expired dataset when the upstream API fails.",
    )
    ap.add_argument(
        "--timezone",
        default=defaults.timezone,
        help="Timezone used for prayer countdowns (default: %(default)s).",
    )
    _add_debug_flag(ap)
    return ap


def build_read_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Read chapters in the terminal from a running RuhVerse site.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "--url",
        default=DEFAULT_READ_URL,
        help="Page to start from (default: %(default)s).",
    )
    ap.add_argument(
        "--surah",
        type=int,
        help=f"Chapter number to open (1-{TOTAL_CHAPTERS}); overrides the URL path.",
    )
    _add_debug_flag(ap)
    return ap


class ConsoleView(ReaderView):
    def __init__(self, console: Console) -> None:
        self.console = console
        self.items: list[ChapterListItem] = []
        self.path: str | None = None

    def show_loading(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def show_error(self, message: str) -> None:
        self.console.print(f"[bold red]{escape(message)}[/bold red]")

    def show_chapter(self, view: ChapterView) -> None:
        self.console.rule(f"[bold]{escape(view.title)}[/bold]  {escape(view.name)}")
        self.console.print(f"[italic]{escape(view.english_name_translation)}[/italic]", justify="center")
        if view.bismillah:
            self.console.print(view.bismillah, justify="center")
        for verse in view.verses:
            self.console.print(f"{escape(verse.arabic)} ({verse.number_in_surah})", justify="right")
            self.console.print(f"[dim]{verse.number_in_surah}. {escape(verse.english)}[/dim]")
        pagination = view.pagination
        self.console.print(
            f"[dim]Surah {pagination.current} of {pagination.total} · {self.path or view.path}[/dim]"
        )

    def show_chapter_list(self, items: list[ChapterListItem]) -> None:
        self.items = items

    def replace_url(self, path: str) -> None:
        self.path = path

    def print_chapter_list(self) -> None:
        if not self.items:
            self.console.print("[yellow]No Surah matches.[/yellow]")
            return
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Surah")
        table.add_column("Meaning")
        table.add_column("Name", justify="right")
        for item in self.items:
            style = "bold green" if item.active else None
            table.add_row(
                str(item.number),
                item.english_name,
                item.english_name_translation,
                item.name,
                style=style,
            )
        self.console.print(table)


def _fetch_page(session: requests.Session, url: str, console: Console) -> PageBootstrap:
    try:
        response = session.get(url, timeout=30)
    except requests.RequestException as exc:
        console.print(f"[yellow]Could not fetch {escape(url)}: {escape(str(exc))}[/yellow]")
        return PageBootstrap()
    if response.status_code != 200:
        console.print(f"[yellow]{escape(url)} answered {response.status_code}[/yellow]")
        return PageBootstrap()
    return extract_bootstrap(response.text)


async def _read_loop(
    controller: HydrationController,
    navigator: ReaderNavigator,
    view: ConsoleView,
    page: PageBootstrap,
    path: str,
    query: str,
) -> int:
    if not await controller.start(page, path=path, query=query):
        return 1
    loop = asyncio.get_running_loop()
    ask = functools.partial(Prompt.ask, READ_PROMPT, console=view.console, default="n")
    while True:
        command = (await loop.run_in_executor(None, ask)).strip()
        if command in {"q", "quit"}:
            break
        if command in {"n", "next"}:
            if not await navigator.change_chapter(1):
                view.show_error("Already at the last Surah.")
        elif command in {"p", "prev"}:
            if not await navigator.change_chapter(-1):
                view.show_error("Already at the first Surah.")
        elif command.startswith("/"):
            navigator.search(command[1:])
            view.print_chapter_list()
        elif command.isascii() and command.isdigit():
            number = int(command)
            if not 1 <= number <= TOTAL_CHAPTERS:
                view.show_error(f"Surah number must be between 1 and {TOTAL_CHAPTERS}.")
                continue
            await navigator.select_chapter(number - 1)
        else:
            view.show_error(f"Unknown command: {command}")
    task = controller.background_task
    if task is not None and not task.done():
        task.cancel()
    return 0


def _run_read(args: argparse.Namespace) -> int:
    set_debug_logging(args.debug)
    parts = urlsplit(args.url)
    if not parts.scheme or not parts.netloc:
        raise SystemExit(f"--url must be an absolute http(s) URL: {args.url}")
    path, query = parts.path, parts.query
    if args.surah is not None:
        if not 1 <= args.surah <= TOTAL_CHAPTERS:
            raise SystemExit(f"--surah must be between 1 and {TOTAL_CHAPTERS}.")
        path = "/quran.html" if args.surah == 1 else f"/quran/surah/{args.surah}"
        query = ""
    page_url = urlunsplit((parts.scheme, parts.netloc, path, query, ""))
    site_url = urlunsplit((parts.scheme, parts.netloc, "", "", ""))

    console = Console()
    session = requests.Session()
    page = _fetch_page(session, page_url, console)
    view = ConsoleView(console)
    source = DatasetSource(site_url, session=session)
    controller = HydrationController(source, view)
    navigator = ReaderNavigator(controller)
    console.print(Panel.fit(escape(f"RuhVerse reader · {page_url} · bootstrap: {page.mode}")))
    try:
        return asyncio.run(_read_loop(controller, navigator, view, page, path, query))
    except (KeyboardInterrupt, EOFError):
        return 0
    finally:
        source.close()


def _run_web(args: argparse.Namespace) -> int:
    set_debug_logging(args.debug)
    config = WebConfig(
        base_url=args.base_url.rstrip("/"),
        host=args.host,
        port=args.port,
        cache_ttl=args.cache_ttl,
        legacy_bootstrap=args.legacy_bootstrap,
        serve_stale=not args.no_stale,
        timezone=args.timezone,
    )
    app = create_app(config)
    console = Console()
    console.print(f"RuhVerse SSR server running on http://localhost:{config.port}")
    console.print(f"Canonical base URL: {config.base_url}")
    console.print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_config=build_uvicorn_log_config(args.debug),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "web":
        return _run_web(build_web_parser().parse_args(argv[1:]))
    if argv and argv[0] == "read":
        return _run_read(build_read_parser().parse_args(argv[1:]))

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
