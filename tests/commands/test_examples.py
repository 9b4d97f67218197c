"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from mdns_responder.cli import cli
from mdns_responder.commands._base import render_examples

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["mdns-responder validate", "sudo mdns-responder install"]),
    (["run", "--examples"], ["--grace-timeout 10", "--watch-interval 0"]),
    (["install", "--examples"], ["sudo mdns-responder install"]),
    (["uninstall", "--examples"], ["sudo mdns-responder uninstall"]),
    (["status", "--examples"], ["mdns-responder --json status"]),
    (["validate", "--examples"], ["mdns-responder validate"]),
    (["discover", "--examples"], ["--service-type _http._tcp.local."]),
    (["service", "--examples"], ["python -m mdns_responder"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples") or "root"


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


@pytest.mark.parametrize("args", [["run", "--help"], ["status", "--help"]])
def test_examples_listed_in_help(cli_runner: CliRunner, args: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert "--examples" in result.output


def test_help_points_at_examples(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["run", "--help"])
    assert "run --examples' for usage examples" in result.output


def test_examples_exit_before_command_runs(cli_runner: CliRunner) -> None:
    # Eager flag: the missing config is never looked at.
    result = cli_runner.invoke(cli, ["-c", "/nonexistent/config.json", "validate", "--examples"])
    assert result.exit_code == 0
    assert "CONFIG_NOT_FOUND" not in result.output


class TestRenderExamples:
    def test_description_and_prompt(self) -> None:
        text = render_examples(
            "mdns-responder run",
            [("Advertise", "mdns-responder run"), (None, "mdns-responder run -h")],
        )
        assert text == (
            "Examples for 'mdns-responder run':\n"
            "\n"
            "  # Advertise\n"
            "  $ mdns-responder run\n"
            "\n"
            "  $ mdns-responder run -h"
        )
