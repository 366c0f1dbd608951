import asyncio
import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence

from lxml import etree
from tqdm.asyncio import tqdm_asyncio

from spricon.utils import COMPONENT_SUFFIX, SVG_SUFFIX, IconIdentity, IconSource, SpriconError, ensure_write

if TYPE_CHECKING:
    from spricon.config import BuildConfig

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

VIEWBOX_RE = re.compile(r'viewBox="([^"]+)"')
SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>")
SVG_CLOSE = "</svg>"
XMLNS_RE = re.compile(r'\s*xmlns="[^"]*"')
# XML declaration, doctype and comments ahead of the root tag.
PROLOG_RE = re.compile(r"\A(?:\s+|<\?xml.*?\?>|<!DOCTYPE[^>]*>|<!--.*?-->)*", re.DOTALL)

SPRITE_HEADER = [
    '<?xml version="1.0" encoding="UTF-8"?>',
    f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}">',
    "<defs>",
]
SPRITE_FOOTER = ["</defs>", "</svg>"]

HASH_LENGTH = 8


class SvgStructureError(SpriconError):
    pass


@dataclass(frozen=True)
class SpriteSymbol:
    symbol_id: str
    view_box: str
    body_markup: str


@dataclass(frozen=True)
class Sprite:
    symbols: List[SpriteSymbol]
    markup: str
    optimized_markup: str
    content_hash: Optional[str]
    file_name: str

    @property
    def symbol_ids(self) -> List[str]:
        return [s.symbol_id for s in self.symbols]


def synthesize_symbol(source: IconSource, suffix: str = COMPONENT_SUFFIX) -> SpriteSymbol:
    """Rewrite one icon's <svg> root into a <symbol> for the sprite.

    This is a textual rewrite, not a parse: the root tag is swapped for
    <symbol id=... viewBox=...>, the closing tag follows, and default
    namespace declarations are dropped since the sprite declares them once.
    """
    content = PROLOG_RE.sub("", source.raw_markup, count=1)
    symbol_id = IconIdentity.from_file_name(source.file_name, suffix).symbol_id

    open_tag = SVG_OPEN_RE.search(content)
    close_at = content.rfind(SVG_CLOSE)
    if open_tag is None or close_at < open_tag.end():
        raise SvgStructureError(f"{source.path}: expected an <svg ...>...</svg> document")

    m = VIEWBOX_RE.search(open_tag.group(0))
    view_box = m.group(0) if m else ""
    if not view_box:
        logging.warning(f"{source.file_name}: no viewBox, the symbol renders at its native scale")

    symbol_tag = f'<symbol id="{symbol_id}" {view_box}>' if view_box else f'<symbol id="{symbol_id}">'
    inner = content[open_tag.end():close_at]
    body = f"{symbol_tag}{inner}</symbol>{content[close_at + len(SVG_CLOSE):]}"
    body = XMLNS_RE.sub("", body).strip()

    logging.debug(f"Synthesised symbol {symbol_id} from {source.file_name}")
    return SpriteSymbol(symbol_id=symbol_id, view_box=view_box, body_markup=body)


def assemble_document(symbols: Iterable[SpriteSymbol]) -> str:
    return "\n".join([*SPRITE_HEADER, *(s.body_markup for s in symbols), *SPRITE_FOOTER])


def content_hash(markup: str) -> str:
    return hashlib.md5(markup.encode("utf-8")).hexdigest()[:HASH_LENGTH]


# Optimiser plugins. Each one edits the parsed tree in place.


def remove_comments(root):
    etree.strip_elements(root, etree.Comment, with_tail=False)


def remove_metadata(root):
    for elem in root.xpath(".//*[local-name()='metadata' or local-name()='title' or local-name()='desc']"):  # type: ignore
        elem.getparent().remove(elem)


def remove_dimensions(root):
    # Sizing is left to the viewBox wherever there is one.
    for elem in root.xpath(".|.//*[local-name()='svg']"):  # type: ignore
        if elem.get("viewBox") is None:
            continue
        for attr_name in ("width", "height"):
            elem.attrib.pop(attr_name, None)


ATTR_ORDER = ["id", "width", "height", "x", "x1", "x2", "y", "y1", "y2", "cx", "cy", "r", "fill", "stroke", "marker", "d", "points"]


def _attr_sort_key(attr_name: str):
    if "}" in attr_name:
        return (2, 0, attr_name)
    if attr_name in ATTR_ORDER:
        return (0, ATTR_ORDER.index(attr_name), attr_name)
    return (1, 0, attr_name)


def sort_attrs(root):
    for elem in root.iter():
        if not isinstance(elem.tag, str) or len(elem.attrib) < 2:
            continue
        items = sorted(elem.attrib.items(), key=lambda item: _attr_sort_key(item[0]))
        elem.attrib.clear()
        for attr_name, value in items:
            elem.set(attr_name, value)


def cleanup_whitespace(root):
    for elem in root.iter():
        if elem.text is not None and not elem.text.strip():
            elem.text = None
        if elem.tail is not None and not elem.tail.strip():
            elem.tail = None


PLUGINS: Dict[str, Callable] = {
    "remove_comments": remove_comments,
    "remove_metadata": remove_metadata,
    "remove_dimensions": remove_dimensions,
    "sort_attrs": sort_attrs,
    "cleanup_whitespace": cleanup_whitespace,
}

DEFAULT_OPTIMIZER_CONFIG = {
    "plugins": ["remove_dimensions", "sort_attrs"],
    "indent": 2,
    "pretty": True,
}

# svgo names for the plugins above, so an svgoConfig carries over unchanged.
SVGO_PLUGIN_NAMES = {
    "removeComments": "remove_comments",
    "removeMetadata": "remove_metadata",
    "removeDimensions": "remove_dimensions",
    "sortAttrs": "sort_attrs",
    "cleanupWhitespace": "cleanup_whitespace",
}


def resolve_optimizer_config(config: Optional[dict] = None) -> dict:
    """Merge ``config`` over the defaults and check it.

    Plugins may be given by their svgo names, and as ``{"name": ...}``
    mappings; svgo's ``js2svg`` block supplies ``indent`` and ``pretty``.
    Raises ValueError for anything the optimiser would not understand.
    """
    config = dict(config or {})
    js2svg = config.pop("js2svg", None) or {}
    if not isinstance(js2svg, dict):
        raise ValueError(f"Optimizer js2svg must be a mapping, got {type(js2svg).__name__}")
    unknown = (set(config) - set(DEFAULT_OPTIMIZER_CONFIG)) | (set(js2svg) - {"indent", "pretty"})
    if unknown:
        raise ValueError(f"Unknown optimizer option(s): {', '.join(sorted(unknown))}")

    resolved = {**DEFAULT_OPTIMIZER_CONFIG, **js2svg, **config}
    if not isinstance(resolved["plugins"], list):
        raise ValueError(f"Optimizer plugins must be a list, got {type(resolved['plugins']).__name__}")
    plugins = []
    for plugin in resolved["plugins"]:
        name = plugin.get("name") if isinstance(plugin, dict) else plugin
        name = SVGO_PLUGIN_NAMES.get(name, name)
        if name not in PLUGINS:
            raise ValueError(f"Unknown optimizer plugin: {name}")
        plugins.append(name)
    resolved["plugins"] = plugins

    if isinstance(resolved["indent"], bool) or not isinstance(resolved["indent"], int) or resolved["indent"] < 0:
        raise ValueError(f"Optimizer indent must be a non-negative integer, got {resolved['indent']!r}")
    resolved["pretty"] = bool(resolved["pretty"])
    return resolved


def optimize(markup: str, config: Optional[dict] = None) -> str:
    """Run the configured plugins over an SVG document and serialise it."""
    config = resolve_optimizer_config(config)
    plugins = [PLUGINS[name] for name in config["plugins"]]

    root = etree.fromstring(markup.encode("utf-8"))
    for plugin in plugins:
        plugin(root)

    if config["pretty"]:
        etree.indent(root, space=" " * config["indent"])
    return (
        etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=config["pretty"])
        .decode("utf-8")
        .rstrip("\n")
        + "\n"
    )


def sprite_file_name(markup: str, sprite_name: str, hash_suffix: bool) -> str:
    if hash_suffix:
        return f"{sprite_name}-{content_hash(markup)}"
    return sprite_name


def assemble_sprite(sources: Sequence[IconSource], config: "BuildConfig") -> Sprite:
    symbols = [synthesize_symbol(s) for s in sorted(sources, key=lambda s: s.file_name)]
    markup = assemble_document(symbols)
    return Sprite(
        symbols=symbols,
        markup=markup,
        optimized_markup=optimize(markup, config.optimizer_config),
        content_hash=content_hash(markup) if config.output.hash_suffix else None,
        file_name=sprite_file_name(markup, config.output.sprite_name, config.output.hash_suffix),
    )


async def _read_source(path: Path) -> IconSource:
    return IconSource(path=path, raw_markup=await asyncio.to_thread(path.read_text, encoding="utf-8"))


async def read_icon_sources(input_dir: Path, progress: bool = True) -> List[IconSource]:
    """Read every *.svg file in ``input_dir``, ordered by file name."""
    paths = sorted(
        (p for p in input_dir.iterdir() if p.name.endswith(SVG_SUFFIX) and p.is_file()),
        key=lambda p: p.name,
    )
    return await tqdm_asyncio.gather(
        *(_read_source(p) for p in paths),
        desc="Reading SVGs",
        unit=" files",
        disable=not progress,
    )


async def build_sprite_svg(config: "BuildConfig", sources: Sequence[IconSource], progress: bool = True) -> Sprite:
    """Assemble the sprite and write an identical copy into every sprite directory."""
    sprite = assemble_sprite(sources, config)
    targets = [d / f"{sprite.file_name}{SVG_SUFFIX}" for d in config.output.sprite_path]
    await tqdm_asyncio.gather(
        *(asyncio.to_thread(ensure_write, target, sprite.optimized_markup) for target in targets),
        desc="Writing sprite",
        unit=" files",
        disable=not progress,
    )
    for target in targets:
        logging.info(f"Wrote sprite with {len(sprite.symbols)} symbols to {target}")
    return sprite
