"""Shared pytest fixtures for spricon tests."""

import logging
from pathlib import Path

import pytest

from spricon.config import BuildConfig, OutputConfig

HOME_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">'
    '<path d="M3 12l9-9 9 9"/></svg>'
)
SETTINGS_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none">'
    '<circle cx="12" cy="12" r="3"/></svg>\n'
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handlers and levels that setup_logging() leaves on the root logger."""
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if handler not in handlers:
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)


@pytest.fixture
def icon_dir(tmp_path):
    """An input directory holding home.svg, settings.svg and a stray non-SVG file."""
    path = tmp_path / "icons"
    path.mkdir()
    (path / "home.svg").write_text(HOME_SVG)
    (path / "settings.svg").write_text(SETTINGS_SVG)
    (path / "README.txt").write_text("not an icon")
    return path


@pytest.fixture
def make_config(tmp_path, icon_dir):
    """Factory for a BuildConfig writing into tmp_path/dist and tmp_path/public."""

    def _make(**output) -> BuildConfig:
        output.setdefault("dist_path", tmp_path / "dist")
        output.setdefault("sprite_path", [tmp_path / "public"])
        optimizer_config = output.pop("optimizer_config", None)
        return BuildConfig(input=icon_dir, output=OutputConfig(**output), optimizer_config=optimizer_config)

    return _make


def write_icon(directory: Path, name: str, markup: str = HOME_SVG) -> Path:
    path = directory / name
    path.write_text(markup)
    return path
