import argparse
import asyncio
import logging
import shutil
import sys
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from tqdm.asyncio import tqdm_asyncio

from spricon.components import AGGREGATE_COMPONENT_NAME, GeneratedIcon, build_icon_component, build_icons, build_index
from spricon.config import BuildConfig, ConfigurationLoadError, load_config
from spricon.svg import Sprite, SvgStructureError, build_sprite_svg, read_icon_sources
from spricon.transform import IDENTIFIER_RE, ComponentTransformError
from spricon.utils import IconSource, SpriconError, setup_logging


class IdentifierCollisionError(SpriconError):
    pass


class InvalidIdentifierError(SpriconError):
    pass


@dataclass(frozen=True)
class BuildResult:
    sprite: Sprite
    icons: List[GeneratedIcon]

    @property
    def sprite_file_name(self) -> str:
        return self.sprite.file_name


def check_identifier_collisions(sources: Sequence[IconSource]):
    """Refuse input sets where two files would write the same component.

    The aggregate component's name is taken too: a file whose name has no
    letters or digits would otherwise be overwritten by it.
    """
    by_name = defaultdict(list)
    for source in sources:
        by_name[source.identity.component_name].append(source.file_name)

    clashes = {name: files for name, files in by_name.items() if len(files) > 1}
    if AGGREGATE_COMPONENT_NAME in by_name:
        clashes[AGGREGATE_COMPONENT_NAME] = [*by_name[AGGREGATE_COMPONENT_NAME], "the Icon lookup component"]
    if clashes:
        details = "; ".join(f"{name} <- {', '.join(files)}" for name, files in sorted(clashes.items()))
        raise IdentifierCollisionError(f"Icon files map to the same component name: {details}")


def check_identifiers(sources: Sequence[IconSource]):
    """Refuse file names that do not derive to a usable component identifier."""
    invalid = [
        f"{source.file_name} -> {source.identity.component_name}"
        for source in sources
        if not IDENTIFIER_RE.match(source.identity.component_name)
    ]
    if invalid:
        raise InvalidIdentifierError(f"Icon files do not give valid component names: {'; '.join(invalid)}")


async def _remove_file(path: Path):
    logging.debug(f"Removing stale sprite {path}")
    await asyncio.to_thread(path.unlink, missing_ok=True)


async def cleanup_old_sprite_files(config: BuildConfig, progress: bool = True):
    """Remove sprites of earlier builds, including hash-suffixed ones."""
    stale = []
    for sprite_dir in config.output.sprite_path:
        if not sprite_dir.is_dir():
            continue
        stale.extend(
            p for p in sprite_dir.iterdir()
            if p.name.startswith(config.output.sprite_name) and p.is_file()
        )

    await tqdm_asyncio.gather(
        *(_remove_file(p) for p in stale),
        desc="Removing stale sprites",
        unit=" files",
        disable=not progress,
    )


async def cleanup_old_dist_files(config: BuildConfig):
    dist_dir = config.output.dist_path
    if not dist_dir.exists():
        return
    logging.debug(f"Removing {dist_dir}")
    await asyncio.to_thread(shutil.rmtree, dist_dir)


async def build_sprite_icons(
    config: Optional[BuildConfig] = None,
    *,
    base_dir: Optional[Path] = None,
    config_path: Optional[Path] = None,
    progress: bool = True,
) -> BuildResult:
    """Build the sprite and the icon components.

    Without ``config`` the configuration file of the project in ``base_dir``
    (default: the working directory) is loaded first.
    """
    if config is None:
        config = load_config(base_dir, config_path)

    sources = await read_icon_sources(config.input, progress)
    check_identifier_collisions(sources)
    check_identifiers(sources)

    await cleanup_old_sprite_files(config, progress)
    await cleanup_old_dist_files(config)

    sprite = await build_sprite_svg(config, sources, progress)
    icons = await build_icons(
        [s.identity for s in sources],
        config.output.sprite_href,
        sprite.file_name,
        config.output.dist_path,
        progress,
    )
    icons = await build_icon_component(icons, sprite.file_name, config.output.sprite_href, config.output.dist_path)
    await build_index(icons, config.output.dist_path)

    return BuildResult(sprite=sprite, icons=icons)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Build an SVG sprite and React icon components from a directory of SVG files."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: spricon.config.yaml in the project directory)",
    )
    parser.add_argument(
        "--cwd",
        type=Path,
        default=None,
        help="Project directory that relative paths resolve against (default: current directory)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors, and hide progress bars",
    )
    args = parser.parse_args(argv)

    setup_logging()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    base_dir = args.cwd if args.cwd is not None else Path.cwd()
    try:
        result = asyncio.run(
            build_sprite_icons(base_dir=base_dir, config_path=args.config, progress=not args.quiet)
        )
    except (
        ComponentTransformError,
        ConfigurationLoadError,
        IdentifierCollisionError,
        InvalidIdentifierError,
        SvgStructureError,
    ) as e:
        if e.__cause__ is not None:
            logging.error(f"{e}: {e.__cause__}")
        else:
            logging.error(str(e))
        return 1

    print(f"Icons built: {len(result.icons) - 1} components, sprite {result.sprite_file_name}.svg")
    return 0


if __name__ == "__main__":
    sys.exit(main())
