"""Build configuration.

The configuration is a YAML file (``spricon.config.yaml`` by default) next to
the project it builds for. Paths in it are relative to that base directory:

    input: ./icons
    output:
      distPath: ./src/generated
      spritePath: [./public/icons]
      spriteName: sprite-icons
      hashSuffix: true
      spriteHref: /icons
    optimizerConfig:
      plugins: [remove_dimensions, sort_attrs]
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import yaml

from spricon.svg import resolve_optimizer_config
from spricon.utils import SpriconError

CONFIG_FILE_NAME = "spricon.config.yaml"
DEFAULT_SPRITE_NAME = "sprite-icons"


class ConfigurationLoadError(SpriconError):
    pass


def _resolve(base_dir: Path, path: Union[str, Path]) -> Path:
    return (base_dir / Path(path).expanduser()).resolve()


@dataclass(frozen=True)
class OutputConfig:
    dist_path: Path
    sprite_path: Sequence[Path]
    sprite_name: str = DEFAULT_SPRITE_NAME
    hash_suffix: bool = False
    sprite_href: str = ""

    def __post_init__(self):
        # A single directory is accepted wherever a list is.
        if isinstance(self.sprite_path, (str, Path)):
            object.__setattr__(self, "sprite_path", (Path(self.sprite_path),))
        else:
            object.__setattr__(self, "sprite_path", tuple(Path(p) for p in self.sprite_path))
        object.__setattr__(self, "dist_path", Path(self.dist_path))
        if not self.sprite_name:
            object.__setattr__(self, "sprite_name", DEFAULT_SPRITE_NAME)
        if self.sprite_href is None:
            object.__setattr__(self, "sprite_href", "")

    @classmethod
    def from_dict(cls, data: dict, base_dir: Path) -> "OutputConfig":
        sprite_path = data["spritePath"]
        if isinstance(sprite_path, str):
            sprite_path = [sprite_path]
        return cls(
            dist_path=_resolve(base_dir, data["distPath"]),
            sprite_path=[_resolve(base_dir, p) for p in sprite_path],
            sprite_name=data.get("spriteName") or DEFAULT_SPRITE_NAME,
            hash_suffix=bool(data.get("hashSuffix", False)),
            sprite_href=data.get("spriteHref") or "",
        )


@dataclass(frozen=True)
class BuildConfig:
    """Everything a build needs, resolved once before it starts."""

    input: Path
    output: OutputConfig
    optimizer_config: Optional[dict[str, Any]] = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, "input", Path(self.input))
        # Checked here so a bad optimiser setting fails before any output is touched.
        if self.optimizer_config is not None:
            object.__setattr__(self, "optimizer_config", resolve_optimizer_config(self.optimizer_config))

    @classmethod
    def from_dict(cls, data: dict, base_dir: Path) -> "BuildConfig":
        """Create from a parsed configuration document.

        ``svgoConfig`` is accepted as an alias of ``optimizerConfig``; svgo plugin
        names and its ``js2svg`` block are translated to the local optimiser.
        """
        return cls(
            input=_resolve(base_dir, data["input"]),
            output=OutputConfig.from_dict(data["output"], base_dir),
            optimizer_config=data.get("optimizerConfig", data.get("svgoConfig")),
        )

    @classmethod
    def from_yaml(cls, path: Path, base_dir: Optional[Path] = None) -> "BuildConfig":
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise TypeError(f"{path}: expected a mapping, got {type(data).__name__}")
        return cls.from_dict(data, base_dir if base_dir is not None else path.parent)


def load_config(base_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> BuildConfig:
    """Read the configuration file of the project in ``base_dir``.

    ``config_path`` overrides the default file name and, when relative, is
    taken relative to ``base_dir``. Any failure to read or interpret the file
    is reported as a ConfigurationLoadError.
    """
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
    path = _resolve(base_dir, config_path or CONFIG_FILE_NAME)
    try:
        return BuildConfig.from_yaml(path, base_dir)
    except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        raise ConfigurationLoadError(
            f"Could not load {path.name} configuration file"
        ) from e
