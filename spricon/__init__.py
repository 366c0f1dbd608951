"""Build an SVG sprite and React icon components from a directory of SVGs."""

from spricon.build import BuildResult, IdentifierCollisionError, InvalidIdentifierError, build_sprite_icons
from spricon.components import GeneratedIcon
from spricon.config import BuildConfig, ConfigurationLoadError, OutputConfig, load_config
from spricon.svg import SvgStructureError
from spricon.transform import ComponentTransformError
from spricon.utils import SpriconError

__all__ = [
    "BuildConfig",
    "BuildResult",
    "ComponentTransformError",
    "ConfigurationLoadError",
    "GeneratedIcon",
    "IdentifierCollisionError",
    "InvalidIdentifierError",
    "OutputConfig",
    "SpriconError",
    "SvgStructureError",
    "build_sprite_icons",
    "load_config",
]
