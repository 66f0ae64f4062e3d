"""Shared pytest fixtures for sdlbake tests."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from graphql import DocumentNode

from sdlbake.context import GenerationContext
from sdlbake.core.schema_loader import parse_schema_source

WriteTree = Callable[[dict[str, str]], Path]


@pytest.fixture
def write_tree(tmp_path: Path) -> WriteTree:
    """Return a helper writing ``{relative path: source}`` files below tmp_path."""

    def write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return tmp_path

    return write


@pytest.fixture
def ctx() -> GenerationContext:
    """Return a fresh generation context."""
    return GenerationContext()


@pytest.fixture
def parse_sdl() -> Callable[..., DocumentNode]:
    """Return a helper parsing a dedented SDL snippet."""

    def parse(body: str, name: str = "schema.graphql") -> DocumentNode:
        return parse_schema_source(textwrap.dedent(body), name)

    return parse


@pytest.fixture(autouse=True)
def _reset_sdlbake_logger():
    """Undo the CLI's logging setup so caplog sees sdlbake records."""
    yield
    logger = logging.getLogger("sdlbake")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
