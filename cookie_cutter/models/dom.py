"""Pydantic models for a single snapshot of the accessible page tree.

A :class:`Document` is produced once per classification pass and
discarded afterwards.  Node ids are only meaningful for the
snapshot (and page-side handle) that produced them.
"""

from __future__ import annotations

import pydantic

from cookie_cutter.utils import serialization

_CAMEL = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)


class Rect(pydantic.BaseModel):
    """Rendered bounding box in viewport coordinates."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.y + self.height


class Style(pydantic.BaseModel):
    """The computed style fields the classifier reads."""

    model_config = _CAMEL

    display: str = "block"
    visibility: str = "visible"
    opacity: float = 1.0
    position: str = "static"
    z_index: int | None = None
    background_color: str = "rgba(0, 0, 0, 0)"

    @pydantic.field_validator("z_index", mode="before")
    @classmethod
    def _parse_z_index(cls, value: object) -> object:
        # getComputedStyle reports "auto" for unpositioned elements.
        if value in ("auto", "", None):
            return None
        return value


class Attributes(pydantic.BaseModel):
    """Fixed attribute bag captured for every element."""

    model_config = _CAMEL

    id: str = ""
    class_name: str = ""
    role: str = ""
    aria_label: str = ""
    aria_modal: str = ""
    title: str = ""
    value: str = ""
    href: str | None = None
    type: str = ""


class Node(pydantic.BaseModel):
    """One element of the accessible tree.

    ``parent_id``, ``host_id`` and ``isolated_depth`` are derived
    by :class:`Document` from the child lists.  ``host_id`` is the
    shadow host whose isolated root contains this node (``None`` for
    the main document) and ``isolated_depth`` counts how many
    isolated boundaries separate the node from the main document.
    """

    model_config = _CAMEL

    node_id: int
    tag: str
    attributes: Attributes = pydantic.Field(default_factory=Attributes)
    direct_text: str = ""
    full_text: str = ""
    style: Style = pydantic.Field(default_factory=Style)
    rect: Rect = pydantic.Field(default_factory=Rect)
    children: list[int] = pydantic.Field(default_factory=list)
    shadow_children: list[int] | None = None
    inline_style: dict[str, str] = pydantic.Field(default_factory=dict)

    parent_id: int | None = None
    host_id: int | None = None
    isolated_depth: int = 0

    @pydantic.field_validator("tag")
    @classmethod
    def _lower_tag(cls, value: str) -> str:
        return value.lower()

    @property
    def has_isolated_root(self) -> bool:
        return self.shadow_children is not None


class Viewport(pydantic.BaseModel):
    """Inner window size at snapshot time."""

    width: float = 1280.0
    height: float = 800.0


class Document(pydantic.BaseModel):
    """Flat snapshot of the main tree and every attached isolated tree."""

    model_config = _CAMEL

    viewport: Viewport = pydantic.Field(default_factory=Viewport)
    root_ids: list[int] = pydantic.Field(default_factory=list)
    nodes: list[Node] = pydantic.Field(default_factory=list)

    _index: dict[int, Node] = pydantic.PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        self._index = {node.node_id: node for node in self.nodes}
        self._link()

    def _link(self) -> None:
        """Derive parent, isolated host and depth with an explicit worklist."""
        seen: set[int] = set()
        work: list[tuple[int, int | None, int | None, int]] = [(rid, None, None, 0) for rid in reversed(self.root_ids)]
        while work:
            node_id, parent_id, host_id, depth = work.pop()
            node = self._index.get(node_id)
            if node is None or node_id in seen:
                continue
            seen.add(node_id)
            node.parent_id = parent_id
            node.host_id = host_id
            node.isolated_depth = depth
            if node.shadow_children is not None:
                for child_id in reversed(node.shadow_children):
                    work.append((child_id, node_id, node_id, depth + 1))
            for child_id in reversed(node.children):
                work.append((child_id, node_id, host_id, depth))

    def get(self, node_id: int | None) -> Node | None:
        """Return the node with *node_id*, or ``None``."""
        if node_id is None:
            return None
        return self._index.get(node_id)

    def parent(self, node: Node) -> Node | None:
        return self.get(node.parent_id)

    def __len__(self) -> int:
        return len(self.nodes)
