"""
Candidate discovery: banner-like containers and clickable controls.

Four strategies run on every pass:

1. **direct-match**: class/id/aria-label carries a consent token.
2. **visual-heuristic**: fixed/sticky, layered above the page,
   hugging the top or bottom edge, and talking about cookies.
3. **dialog**: dialog roles or modal/overlay classes that talk
   about cookies.
4. **isolated-subtree**: isolated (shadow) roots whose content talks
   about cookies, searched with an explicit worklist down to
   ``max_isolated_depth``.

Every visible clickable control in the main tree and in the searched
isolated roots is returned, paired with the strongest container it
sits in.  Controls deeper than the isolated depth cap are never seen.
"""

from __future__ import annotations

import dataclasses

from cookie_cutter.consent import patterns
from cookie_cutter.dom import accessor
from cookie_cutter.models import consent, dom
from cookie_cutter.utils import logger

log = logger.create_logger("Discovery")

# Base score contribution per discovery strategy; the more confident
# strategies contribute more.
CONTAINER_BONUS: dict[consent.SourceReason, int] = {
    "direct-match": 10,
    "dialog": 10,
    "isolated-subtree": 6,
    "visual-heuristic": 4,
}

EDGE_DISTANCE_PX = 150
OVERLAY_Z_INDEX = 10
# Text inspected when deciding whether a container talks about cookies.
CONTEXT_TEXT_LIMIT = 2000

_DIALOG_ROLES = frozenset({"dialog", "alertdialog"})
_OVERLAY_POSITIONS = frozenset({"fixed", "sticky"})


@dataclasses.dataclass
class Discovery:
    """Result of one discovery run over a snapshot."""

    containers: list[consent.Container]
    controls: list[consent.Control]
    hidden_controls: list[consent.Control]
    isolated_roots: list[accessor.IsolatedRoot]


def _talks_about_cookies(node: dom.Node) -> bool:
    return patterns.has_cookie_context(node.full_text[:CONTEXT_TEXT_LIMIT])


def is_direct_match(node: dom.Node) -> bool:
    attrs = node.attributes
    identity = accessor.normalize(" ".join((attrs.class_name, attrs.id, attrs.aria_label)))
    return patterns.has_container_token(identity)


def is_visual_overlay(node: dom.Node, viewport: dom.Viewport) -> bool:
    style = node.style
    if style.position not in _OVERLAY_POSITIONS:
        return False
    if style.z_index is None or style.z_index < OVERLAY_Z_INDEX:
        return False
    if not accessor.is_visible(node):
        return False
    near_edge = node.rect.y <= EDGE_DISTANCE_PX or node.rect.bottom >= viewport.height - EDGE_DISTANCE_PX
    return near_edge and _talks_about_cookies(node)


def is_consent_dialog(node: dom.Node) -> bool:
    attrs = node.attributes
    is_modal = (
        attrs.role.lower() in _DIALOG_ROLES
        or attrs.aria_modal.lower() == "true"
        or patterns.has_modal_token(accessor.normalize(f"{attrs.class_name} {attrs.id}"))
    )
    return is_modal and _talks_about_cookies(node)


def classify_container(node: dom.Node, viewport: dom.Viewport) -> consent.SourceReason | None:
    """Return the most confident strategy that flags *node*, if any."""
    if is_direct_match(node):
        return "direct-match"
    if is_consent_dialog(node):
        return "dialog"
    if is_visual_overlay(node, viewport):
        return "visual-heuristic"
    return None


def collect_isolated_roots(document: dom.Document, max_depth: int) -> list[accessor.IsolatedRoot]:
    """Breadth-first walk of isolated roots, never deeper than *max_depth*."""
    found: list[accessor.IsolatedRoot] = []
    work: list[accessor.IsolatedRoot] = []
    for node in accessor.main_tree(document):
        work.extend(accessor.isolated_children(document, node))
    while work:
        root = work.pop(0)
        if root.depth > max_depth:
            log.debug("Isolated root beyond depth cap skipped", {"depth": root.depth})
            continue
        found.append(root)
        for node in accessor.descendants(document, root.top_level_ids):
            work.extend(accessor.isolated_children(document, node))
    return found


def _isolated_root_text(document: dom.Document, root: accessor.IsolatedRoot) -> str:
    parts: list[str] = []
    size = 0
    for node_id in root.top_level_ids:
        node = document.get(node_id)
        if node is None:
            continue
        parts.append(node.full_text)
        size += len(node.full_text)
        if size >= CONTEXT_TEXT_LIMIT:
            break
    return " ".join(parts)[:CONTEXT_TEXT_LIMIT]


def _best_container(
    document: dom.Document,
    node: dom.Node,
    containers: dict[int, consent.Container],
) -> consent.Container | None:
    best: consent.Container | None = None
    current = document.parent(node)
    while current is not None:
        found = containers.get(current.node_id)
        if found is not None and (best is None or found.bonus > best.bonus):
            best = found
        current = document.parent(current)
    return best


def discover(document: dom.Document, *, max_isolated_depth: int = 3) -> Discovery:
    """Run every discovery strategy over *document*."""
    roots = collect_isolated_roots(document, max_isolated_depth)

    searchable: list[dom.Node] = list(accessor.main_tree(document))
    for root in roots:
        searchable.extend(accessor.descendants(document, root.top_level_ids))

    containers: dict[int, consent.Container] = {}
    for node in searchable:
        reason = classify_container(node, document.viewport)
        if reason is not None:
            containers[node.node_id] = consent.Container(node=node, reason=reason, bonus=CONTAINER_BONUS[reason])

    for root in roots:
        if root.host.node_id in containers:
            continue
        if patterns.has_cookie_context(_isolated_root_text(document, root)):
            containers[root.host.node_id] = consent.Container(
                node=root.host,
                reason="isolated-subtree",
                bonus=CONTAINER_BONUS["isolated-subtree"],
            )

    controls: list[consent.Control] = []
    hidden: list[consent.Control] = []
    for node in searchable:
        if not accessor.is_clickable(node):
            continue
        container = _best_container(document, node, containers)
        if container is not None:
            control = consent.Control(node=node, reason=container.reason, container_bonus=container.bonus)
        else:
            control = consent.Control(node=node, reason="isolated-subtree" if node.isolated_depth else "direct-match")
        if accessor.is_visible(node):
            controls.append(control)
        elif accessor.is_style_hidden(node) and (node.tag == "button" or node.attributes.role.lower() == "button"):
            hidden.append(control)

    log.debug(
        "Discovery complete",
        {"containers": len(containers), "controls": len(controls), "isolatedRoots": len(roots)},
    )
    return Discovery(
        containers=list(containers.values()),
        controls=controls,
        hidden_controls=hidden,
        isolated_roots=roots,
    )
