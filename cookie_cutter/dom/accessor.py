"""
Read-only view over a page snapshot.

Every helper here works the same whether a node lives in the main
document or inside one or more nested isolated (shadow) roots:
ancestor walks cross from an isolated root's top-level nodes to its
host element.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterator

from cookie_cutter.models import dom
from cookie_cutter.utils import url

_WS_RE = re.compile(r"\s+")

# Computed background colours that do not count as "filled".
_UNFILLED_BACKGROUNDS = frozenset({"", "transparent", "rgba(0, 0, 0, 0)", "rgb(255, 255, 255)", "rgba(255, 255, 255, 1)"})

_CLICKABLE_INPUT_TYPES = frozenset({"button", "submit"})


@dataclasses.dataclass(frozen=True)
class IsolatedRoot:
    """An isolated sub-tree attached to ``host``."""

    host: dom.Node
    depth: int
    top_level_ids: tuple[int, ...]


def normalize(text: str) -> str:
    """Collapse whitespace and lowercase *text*."""
    return _WS_RE.sub(" ", text).strip().lower()


def is_visible(node: dom.Node) -> bool:
    """True when the node is rendered: not hidden by style and non-zero size."""
    if is_style_hidden(node):
        return False
    return node.rect.width > 0 and node.rect.height > 0


def is_style_hidden(node: dom.Node) -> bool:
    style = node.style
    return style.display == "none" or style.visibility == "hidden" or style.opacity == 0


def text_parts(node: dom.Node) -> list[str]:
    """Label text followed by the attribute labels that add new signal.

    Prefers the node's own direct text so a short label is matched
    precisely; falls back to the full rendered text.  The aria-label,
    value and title attributes are kept unless they already appear in
    the label text.
    """
    label = normalize(node.direct_text) or normalize(node.full_text)
    parts = [label] if label else []
    for extra in (node.attributes.aria_label, node.attributes.value, node.attributes.title):
        extra_norm = normalize(extra)
        if extra_norm and extra_norm not in label and extra_norm not in parts:
            parts.append(extra_norm)
    return parts


def text(node: dom.Node) -> str:
    """Text signature of a control, lowercased."""
    return " ".join(text_parts(node))


def isolated_children(document: dom.Document, node: dom.Node) -> list[IsolatedRoot]:
    """Isolated sub-trees attached to *node* (zero or one per element)."""
    if node.shadow_children is None:
        return []
    return [IsolatedRoot(host=node, depth=node.isolated_depth + 1, top_level_ids=tuple(node.shadow_children))]


def ancestors(document: dom.Document, node: dom.Node, limit: int) -> Iterator[tuple[int, dom.Node]]:
    """Yield ``(distance, ancestor)`` pairs, nearest first, up to *limit* levels."""
    current = document.parent(node)
    distance = 1
    while current is not None and distance <= limit:
        yield distance, current
        current = document.parent(current)
        distance += 1


def descendants(document: dom.Document, top_level_ids: tuple[int, ...] | list[int]) -> Iterator[dom.Node]:
    """Walk the light tree under *top_level_ids* without entering nested isolated roots."""
    work = list(reversed(top_level_ids))
    while work:
        node = document.get(work.pop())
        if node is None:
            continue
        yield node
        work.extend(reversed(node.children))


def main_tree(document: dom.Document) -> Iterator[dom.Node]:
    """Every node of the main document (isolated depth 0)."""
    return descendants(document, document.root_ids)


def contains(document: dom.Document, container: dom.Node, node: dom.Node) -> bool:
    """True if *container* is *node* or one of its ancestors (across isolated roots)."""
    current: dom.Node | None = node
    while current is not None:
        if current.node_id == container.node_id:
            return True
        current = document.parent(current)
    return False


def is_clickable(node: dom.Node) -> bool:
    """Buttons, role=button, button/submit inputs and non-navigating anchors."""
    if node.tag == "button" or node.attributes.role.lower() == "button":
        return True
    if node.tag == "input":
        return node.attributes.type.lower() in _CLICKABLE_INPUT_TYPES
    if node.tag == "a":
        return not url.is_navigating_href(node.attributes.href)
    return False


def is_native_button(node: dom.Node) -> bool:
    if node.tag == "button":
        return True
    return node.tag == "input" and node.attributes.type.lower() in _CLICKABLE_INPUT_TYPES


def has_filled_background(node: dom.Node) -> bool:
    """Heuristic for "primary" styling: a non-transparent, non-white background."""
    return node.style.background_color.strip().lower() not in _UNFILLED_BACKGROUNDS


def is_viewport_sized(node: dom.Node, viewport: dom.Viewport) -> bool:
    """Containers that cover the whole viewport trivially contain everything."""
    return node.rect.width > viewport.width * 0.95 and node.rect.height > viewport.height * 0.9


def identity_text(node: dom.Node) -> str:
    """class, id, aria-label and title joined and lowercased."""
    attrs = node.attributes
    return normalize(" ".join((attrs.class_name, attrs.id, attrs.aria_label, attrs.title)))
