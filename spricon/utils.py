from dataclasses import dataclass
import logging
import re
from pathlib import Path


COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[32m",  # green
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
COLOR_RESET = "\033[0m"

SVG_SUFFIX = ".svg"
COMPONENT_SUFFIX = "Icon"

# Acronym runs ("XMLHttp" -> "XML", "Http"), capitalised or lower words,
# digit runs with the lowercase letters that follow them ("1st", "2x").
WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+[a-z]*")


class SpriconError(Exception):
    """Base class for build errors reported to the user."""


class ColorFormatter(logging.Formatter):
    def format(self, record):
        # Copy so other handlers see the plain level name.
        record = logging.makeLogRecord(record.__dict__)
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{COLOR_RESET}"
        return super().format(record)


def setup_logging(level: int = logging.INFO):
    for handler in logging.root.handlers:
        if isinstance(handler.formatter, ColorFormatter):
            break
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(ColorFormatter("%(levelname)s %(message)s"))
        logging.root.addHandler(handler)
    logging.root.setLevel(level)


def derive_identifier(name: str) -> str:
    """Turn a file name (without extension) into a PascalCase identifier.

    Words are split on any non-alphanumeric character and on camel-case humps;
    each word is capitalised and the rest of it lowercased, so "arrow-left",
    "arrow_left" and "ArrowLeft" all become "ArrowLeft".
    """
    return "".join(word[0].upper() + word[1:].lower() for word in WORD_RE.findall(name))


def strip_svg_suffix(file_name: str) -> str:
    if file_name.endswith(SVG_SUFFIX):
        return file_name[: -len(SVG_SUFFIX)]
    return file_name


def ensure_write(path: Path, content: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@dataclass(frozen=True)
class IconIdentity:
    base_name: str
    component_name: str
    symbol_id: str

    @classmethod
    def from_file_name(cls, file_name: str, suffix: str = COMPONENT_SUFFIX) -> "IconIdentity":
        stem = strip_svg_suffix(file_name)
        base_name = derive_identifier(stem)
        return cls(
            base_name=base_name,
            component_name=f"{base_name}{COMPONENT_SUFFIX}",
            # The suffix replaces the extension before deriving, as the sprite always has.
            symbol_id=derive_identifier(f"{stem}{suffix}"),
        )


@dataclass(frozen=True)
class IconSource:
    path: Path
    raw_markup: str

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def identity(self) -> IconIdentity:
        return IconIdentity.from_file_name(self.file_name)

    def __post_init__(self):
        if not self.path.name.endswith(SVG_SUFFIX):
            raise ValueError(f"Icon source must be an SVG file (path={self.path})")
