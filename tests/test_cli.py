# File: tests/test_cli.py
from __future__ import annotations

import pytest

import sitecrawl.cli as cli_module
from sitecrawl.cli import LEGEND, check_input, main, parse_bool
from sitecrawl.core import Crawler


@pytest.fixture()
def patch_crawler(monkeypatch, session):
    """Route the CLI's Crawler through the fake session."""
    session.add("http://example.com/", '<a href="/a">a</a><script src="/x.js"></script>')
    session.add("http://example.com/a", "<html></html>")

    def factory(**kwargs):
        return Crawler(session=session, **kwargs)

    monkeypatch.setattr(cli_module, "Crawler", factory)
    return session


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_parse_bool_true(text: str):
    assert parse_bool(text) is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_parse_bool_false(text: str):
    assert parse_bool(text) is False


@pytest.mark.parametrize("text", ["yes", "", "tRuE", "2"])
def test_parse_bool_invalid(text: str):
    with pytest.raises(ValueError):
        parse_bool(text)


@pytest.mark.parametrize(
    "restrict_arg, depth_arg, expected",
    [
        ("true", "1", (True, 1)),
        ("FALSE", "2", (False, 2)),
    ],
)
def test_check_input_valid(restrict_arg: str, depth_arg: str, expected):
    assert check_input(restrict_arg, depth_arg) == expected


@pytest.mark.parametrize(
    "restrict_arg, depth_arg, message",
    [
        ("true", "two", "max-depth must be an integer."),
        ("true", "0", "max-depth must be greater than or equal to 1."),
        ("maybe", "-1", "max-depth must be greater than or equal to 1."),
        ("maybe", "2", "restrict-to-domain must be a boolean value"),
    ],
)
def test_check_input_invalid(restrict_arg: str, depth_arg: str, message: str):
    with pytest.raises(ValueError, match=message):
        check_input(restrict_arg, depth_arg)


def test_main_wrong_argument_count(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["http://example.com", "true"])
    assert exc.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_main_invalid_depth(patch_crawler, capsys):
    assert main(["http://example.com", "true", "0"]) == 1
    assert "Error: max-depth must be greater than or equal to 1." in capsys.readouterr().out
    assert patch_crawler.requested == []


def test_main_unsupported_scheme(patch_crawler, capsys):
    assert main(["ftp://example.com", "false", "1"]) == 1
    assert "Unsupported scheme: ftp" in capsys.readouterr().out
    assert patch_crawler.requested == []


def test_main_crawls(patch_crawler, capsys):
    assert main(["http://example.com", "false", "2"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        LEGEND,
        "example.com/. (1, 0, 0, 0)",
        "    example.com/a. (0, 0, 0, 0)",
    ]


def test_main_verbose_prints_summary(patch_crawler, capsys):
    assert main(["http://example.com", "1", "1", "--verbose"]) == 0
    err = capsys.readouterr().err
    assert "CRAWL SUMMARY" in err
    assert "URLs fetched:           1" in err
    assert "No errors encountered." in err
