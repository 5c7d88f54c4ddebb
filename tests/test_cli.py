from __future__ import annotations

import json
from pathlib import Path

import pytest

from adaptive_news import main as cli
from adaptive_news.config.settings import ENV_SETTINGS_PATH


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.delenv(ENV_SETTINGS_PATH, raising=False)
    monkeypatch.delenv("ADAPTIVE_NEWS_METRICS_PORT", raising=False)


def test_cli_prints_json_for_html_file(tmp_path: Path, listing_html: str, capsys) -> None:
    html_file = tmp_path / "page.html"
    html_file.write_text(listing_html, encoding="utf-8")

    exit_code = cli.main(["https://news.example/", "--html-file", str(html_file)])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["url"] == "https://news.example/"
    assert payload["totalCount"] == 3
    assert payload["newsItems"][0]["link"] == "https://news.example/2024/03/01/council-vote"
    assert set(payload["newsItems"][0]["confidence"]) == {"title", "link", "date", "summary", "overall"}


def test_cli_max_items_override(tmp_path: Path, listing_html: str, capsys) -> None:
    html_file = tmp_path / "page.html"
    html_file.write_text(listing_html, encoding="utf-8")

    assert cli.main(["https://news.example/", "--html-file", str(html_file), "--max-items", "1"]) == 0
    assert json.loads(capsys.readouterr().out)["totalCount"] == 1


def test_cli_reports_invalid_settings(tmp_path: Path, capsys) -> None:
    exit_code = cli.main(["https://news.example/", "--settings", str(tmp_path / "absent.yaml")])

    assert exit_code == 2
    assert "Invalid settings" in capsys.readouterr().err


def test_cli_reports_unreadable_html_file(tmp_path: Path, capsys) -> None:
    exit_code = cli.main(["https://news.example/", "--html-file", str(tmp_path / "absent.html")])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
