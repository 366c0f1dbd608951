"""Generate the React component modules that reference the sprite.

Three kinds of output land in the component directory:

* one ``{Name}Icon.tsx`` per source SVG, each pointing at its own symbol;
* ``Icon.tsx``, which renders any icon by name and exports the list of names
  (``ICON_NAME_LIST``) with the matching ``IconName`` type;
* ``index.ts``, re-exporting all of the above.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from tqdm.asyncio import tqdm_asyncio

from spricon import transform
from spricon.utils import COMPONENT_SUFFIX, IconIdentity, ensure_write

AGGREGATE_COMPONENT_NAME = "Icon"
COMPONENT_EXTENSION = ".tsx"
INDEX_FILE_NAME = "index.ts"


@dataclass(frozen=True)
class GeneratedIcon:
    component_name: str
    source_text: str

    @property
    def icon_name(self) -> str:
        """The name the aggregate component accepts: "HomeIcon" -> "Home"."""
        return re.sub(f"{COMPONENT_SUFFIX}$", "", self.component_name)


def sprite_url(sprite_href: Optional[str], sprite_file_name: str) -> str:
    return f"{sprite_href or ''}/{sprite_file_name}.svg"


def get_svg_icon_content(symbol_id: str, sprite_href: Optional[str], sprite_file_name: str) -> str:
    return "\n".join(
        [
            '<svg fill="none" stroke="currentColor" stroke-width="0" color="currentColor" width="1em" height="1em" >',
            f'<use href="{sprite_url(sprite_href, sprite_file_name)}#{symbol_id}" />',
            "</svg>",
        ]
    )


async def build_icon(identity: IconIdentity, sprite_href: Optional[str], sprite_file_name: str, dist_path: Path) -> GeneratedIcon:
    svg = get_svg_icon_content(identity.component_name, sprite_href, sprite_file_name)
    try:
        content = await transform.react(svg, identity.component_name)
    except Exception:
        logging.error(f"Error building {identity.component_name}")
        raise

    await asyncio.to_thread(ensure_write, dist_path / f"{identity.component_name}{COMPONENT_EXTENSION}", content)
    return GeneratedIcon(component_name=identity.component_name, source_text=content)


async def build_icons(
    identities: Sequence[IconIdentity],
    sprite_href: Optional[str],
    sprite_file_name: str,
    dist_path: Path,
    progress: bool = True,
) -> List[GeneratedIcon]:
    """Write one component per icon; the first failure aborts the batch."""
    icons = await tqdm_asyncio.gather(
        *(build_icon(i, sprite_href, sprite_file_name, dist_path) for i in identities),
        desc="Building components",
        unit=" icons",
        disable=not progress,
    )
    logging.info(f"Generated {len(icons)} icon components in {dist_path}")
    return icons


def render_icon_component(icon_names: Sequence[str], sprite_file_name: str, sprite_href: Optional[str]) -> str:
    names = ", ".join(f"'{name}'" for name in icon_names)
    href = f"`{sprite_url(sprite_href, sprite_file_name)}#${{name}}{COMPONENT_SUFFIX}`"
    return f"""import {{ SVGProps, memo }} from 'react';

export const ICON_NAME_LIST = [{names}] as const;
export type IconName = typeof ICON_NAME_LIST[number];

interface IconProps extends Omit<SVGProps<SVGSVGElement>, 'name'> {{
  name: IconName;
}}

export function Icon({{ name, ...props }}: IconProps) {{
  return <svg color="currentColor" width="1em" height="1em" {{...props}}>
  <use href={{{href}}} />
  </svg>
}}

export default memo(Icon);
"""


async def build_icon_component(
    icons: Sequence[GeneratedIcon],
    sprite_file_name: str,
    sprite_href: Optional[str],
    dist_path: Path,
) -> List[GeneratedIcon]:
    """Write the name-dispatching Icon component and append it to ``icons``."""
    component = render_icon_component([icon.icon_name for icon in icons], sprite_file_name, sprite_href)
    await asyncio.to_thread(ensure_write, dist_path / f"{AGGREGATE_COMPONENT_NAME}{COMPONENT_EXTENSION}", component)
    return [*icons, GeneratedIcon(component_name=AGGREGATE_COMPONENT_NAME, source_text=component)]


def export_all(icons: Sequence[GeneratedIcon], include_extension: bool = True) -> str:
    """Barrel source re-exporting every component.

    Each icon is re-exported as its module's default; the aggregate module is
    wildcard re-exported so ICON_NAME_LIST and IconName come along. With
    ``include_extension`` the icon specifiers end in ``.js``, for a barrel
    consumed as plain ESM after compilation; ``index.ts`` is written without.
    """
    extension = ".js" if include_extension else ""
    lines = []
    for icon in icons:
        if icon.component_name == AGGREGATE_COMPONENT_NAME:
            lines.append(f"export * from './{AGGREGATE_COMPONENT_NAME}'")
        else:
            lines.append(f"export {{ default as {icon.component_name} }} from './{icon.component_name}{extension}'")
    return "\n".join(lines) + "\n"


async def build_index(icons: Sequence[GeneratedIcon], dist_path: Path):
    await asyncio.to_thread(ensure_write, dist_path / INDEX_FILE_NAME, export_all(icons, include_extension=False))
