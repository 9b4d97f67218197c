"""Shared pytest fixtures for mdns-responder tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from fakes import SAMPLE_CONFIG, FakeAdapters, FakeBackend, adapter

from mdns_responder.config.models import ServiceConfig


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_data() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_CONFIG))


@pytest.fixture
def sample_config(sample_data: dict[str, Any]) -> ServiceConfig:
    return ServiceConfig.model_validate(sample_data)


@pytest.fixture
def config_file(tmp_path: Path, sample_data: dict[str, Any]) -> Path:
    """Sample config written to a temp file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(sample_data), encoding="utf-8")
    return path


@pytest.fixture
def lan_adapters() -> FakeAdapters:
    """A VPN adapter enumerated before the physical Ethernet adapter."""
    return FakeAdapters(
        [
            adapter("VPN Adapter", "10.8.0.2"),
            adapter("Ethernet", "192.168.1.50"),
        ]
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None]:
    """CLI invocations reconfigure logging; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
