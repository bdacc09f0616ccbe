from __future__ import annotations

import asyncio

import pytest
from rich.console import Console

import ruhverse.cli as cli
from ruhverse.hydration import HydrationController, PageBootstrap
from ruhverse.reader import ReaderNavigator


class NoSource:
    def fetch_site_dataset(self):
        raise AssertionError("no network expected")

    fetch_arabic = fetch_english = fetch_site_dataset


def _scripted_prompt(monkeypatch, commands: list[str]) -> list[str]:
    remaining = list(commands)

    def _ask(prompt, console=None, default=None):
        return remaining.pop(0)

    monkeypatch.setattr(cli.Prompt, "ask", _ask)
    return remaining


def test_main_without_command_prints_help(capsys) -> None:
    assert cli.main([]) == 0
    assert "{web,read}" in capsys.readouterr().out


def test_web_command_starts_uvicorn(monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("PUBLIC_BASE_URL", raising=False)
    calls: dict[str, object] = {}

    def _fake_run(app, host, port, log_config):
        calls["app"] = app
        calls["host"] = host
        calls["port"] = port
        calls["log_config"] = log_config

    monkeypatch.setattr(cli.uvicorn, "run", _fake_run)

    exit_code = cli.main(
        ["web", "--port", "4100", "--base-url", "https://mirror.test/", "--legacy-bootstrap"]
    )

    assert exit_code == 0
    assert calls["port"] == 4100
    assert calls["host"] == "0.0.0.0"
    config = calls["app"].state.config
    assert config.base_url == "https://mirror.test"
    assert config.legacy_bootstrap is True
    assert config.serve_stale is True
    assert "ruhverse" in calls["log_config"]["loggers"]


def test_web_parser_reads_port_from_env(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "5055")
    args = cli.build_web_parser().parse_args([])
    assert args.port == 5055


@pytest.mark.parametrize(
    "argv",
    [
        ["read", "--surah", "200"],
        ["read", "--url", "quran.html"],
    ],
)
def test_read_command_rejects_bad_arguments(argv) -> None:
    with pytest.raises(SystemExit):
        cli.main(argv)


def test_read_command_runs_loop(monkeypatch, dataset) -> None:
    requested: list[str] = []

    def _fake_fetch(session, url, console):
        requested.append(url)
        return PageBootstrap(injected_index=None, legacy=dataset)

    monkeypatch.setattr(cli, "_fetch_page", _fake_fetch)
    _scripted_prompt(monkeypatch, ["q"])

    assert cli.main(["read", "--url", "http://site.test/quran.html?x=1", "--surah", "3"]) == 0
    assert requested == ["http://site.test/quran/surah/3"]


def test_read_loop_commands(monkeypatch, dataset) -> None:
    console = Console(record=True, width=120)
    view = cli.ConsoleView(console)
    controller = HydrationController(NoSource(), view)
    navigator = ReaderNavigator(controller)
    remaining = _scripted_prompt(monkeypatch, ["p", "n", "/meaning 11", "7", "200", "zz", "²", "q"])
    page = PageBootstrap(legacy=dataset)

    exit_code = asyncio.run(cli._read_loop(controller, navigator, view, page, "/quran.html", ""))

    assert exit_code == 0
    assert remaining == []
    assert controller.current_chapter_index == 6
    assert view.path == "/quran/surah/7"
    output = console.export_text()
    assert "Already at the first Surah." in output
    assert "Surah number must be between 1 and 114." in output
    assert "Unknown command: zz" in output
    assert "Unknown command: ²" in output
    assert "Meaning 110" in output
    assert "7. Surah-7" in output


def test_fetch_page_handles_error_status() -> None:
    class Response:
        status_code = 503
        text = ""

    class Session:
        def get(self, url, timeout=None):
            return Response()

    console = Console(record=True)
    page = cli._fetch_page(Session(), "http://site.test/quran.html", console)
    assert page.mode == "absent"
    assert "503" in console.export_text()
