"""Turn standalone SVG markup into a React component module (TSX).

The output follows the shape SVGR gives its components: a forwardRef'd,
memoised function component taking SVG props plus an optional ``title``
rendered as a <title> element labelled by ``titleId``.
"""

import json
import re
from typing import List

from lxml import etree

from spricon.utils import SpriconError

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Attributes whose JSX name is not the plain camel-cased form.
JSX_ATTRIBUTES = {
    "class": "className",
    "for": "htmlFor",
    "xlink:href": "xlinkHref",
    "xml:space": "xmlSpace",
    "xmlns:xlink": "xmlnsXlink",
}


class ComponentTransformError(SpriconError):
    def __init__(self, component_name: str, reason: str):
        super().__init__(f"Could not transform {component_name}: {reason}")
        self.component_name = component_name


def jsx_attribute_name(name: str) -> str:
    if name in JSX_ATTRIBUTES:
        return JSX_ATTRIBUTES[name]
    if name.startswith(("data-", "aria-")):
        return name
    head, *rest = re.split(r"[-:]", name)
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _qualified_name(elem, name: str) -> str:
    """Map lxml's {namespace}local form back to prefix:local."""
    qname = etree.QName(name)
    if qname.namespace is None:
        return qname.localname
    for prefix, uri in elem.nsmap.items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{qname.localname}"
    if qname.namespace == "http://www.w3.org/XML/1998/namespace":
        return f"xml:{qname.localname}"
    return qname.localname


def _jsx_value(value: str) -> str:
    if '"' in value or "{" in value or "}" in value:
        return "{" + json.dumps(value) + "}"
    return f'"{value}"'


def _jsx_text(text: str) -> str:
    text = text.strip()
    return "{" + json.dumps(text) + "}" if text else ""


def _render_element(elem) -> str:
    tag = etree.QName(elem).localname
    attrs = "".join(
        f" {jsx_attribute_name(_qualified_name(elem, k))}={_jsx_value(v)}"
        for k, v in elem.attrib.items()
    )
    children = _render_children(elem)
    if not children:
        return f"<{tag}{attrs} />"
    return f"<{tag}{attrs}>{children}</{tag}>"


def _render_children(elem) -> str:
    parts: List[str] = [_jsx_text(elem.text or "")]
    for child in elem:
        if isinstance(child.tag, str):
            parts.append(_render_element(child))
        parts.append(_jsx_text(child.tail or ""))
    return "".join(parts)


def _render_root(root) -> str:
    attrs = "".join(
        f" {jsx_attribute_name(_qualified_name(root, k))}={_jsx_value(v)}"
        for k, v in root.attrib.items()
    )
    title = "{title ? <title id={titleId}>{title}</title> : null}"
    return f"<svg{attrs} ref={{ref}} aria-labelledby={{titleId}} {{...props}}>{title}{_render_children(root)}</svg>"


async def react(markup: str, component_name: str) -> str:
    """Return the source of a TSX module whose default export renders ``markup``."""
    if not IDENTIFIER_RE.match(component_name):
        raise ComponentTransformError(component_name, "not a valid component identifier")
    try:
        root = etree.fromstring(markup.strip().encode("utf-8"))
    except etree.XMLSyntaxError as e:
        raise ComponentTransformError(component_name, str(e)) from e
    if etree.QName(root).localname != "svg":
        raise ComponentTransformError(component_name, f"expected an <svg> root, got <{etree.QName(root).localname}>")

    lines = [
        'import type { SVGProps } from "react";',
        'import { Ref, forwardRef, memo } from "react";',
        "interface SVGRProps {",
        "  title?: string;",
        "  titleId?: string;",
        "}",
        f"const {component_name} = function {component_name}({{",
        "  id,",
        "  title,",
        "  titleId,",
        "  ...props",
        "}: SVGProps<SVGSVGElement> & SVGRProps, ref: Ref<SVGSVGElement>) {",
        f"  return {_render_root(root)};",
        "};",
        f"const ForwardRef = forwardRef({component_name});",
        "const Memo = memo(ForwardRef);",
        "export default Memo;",
        "",
    ]
    return "\n".join(lines)
