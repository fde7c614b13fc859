# =============================================================================
# VisualEyes Heatmap Client - Scene Model
# =============================================================================
# A small, host-independent design document: artboards containing
# rectangles, text and groups.  Node kinds and fill kinds are pydantic
# discriminated unions (the ``kind`` field), so a document round-trips
# through JSON and the workflow never needs isinstance checks on host types.
#
# SceneEditor is the mutation capability the workflow is written against:
# add/remove/move/group/hide/lock, plus access to the current selection.
# =============================================================================

import logging
import uuid
from typing import Annotated, Iterator, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

from plugin.geometry import Bounds

logger = logging.getLogger(__name__)


def _new_guid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Fills
# ---------------------------------------------------------------------------


class SolidColor(BaseModel):
    kind: Literal["solid"] = "solid"
    color: str = Field(..., description="Hex color, e.g. #3E21DE")
    alpha: float = 1.0


class ColorStop(BaseModel):
    color: str
    stop: float = 0.0


class Gradient(BaseModel):
    """Linear gradient, left to right, across the node's bounds."""

    kind: Literal["gradient"] = "gradient"
    stops: List[ColorStop] = Field(..., min_length=1)


class ImageFill(BaseModel):
    kind: Literal["image"] = "image"
    path: str = Field(..., description="Image file stretched over the node")


Fill = Annotated[Union[SolidColor, Gradient, ImageFill], Field(discriminator="kind")]


class Stroke(BaseModel):
    color: str
    width: float = 1.0


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class _NodeBase(BaseModel):
    guid: str = Field(default_factory=_new_guid)
    name: str = ""
    visible: bool = True
    locked: bool = False


class Rectangle(_NodeBase):
    kind: Literal["rectangle"] = "rectangle"
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    fill: Optional[Fill] = None
    fill_enabled: bool = True
    stroke: Optional[Stroke] = None

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.x, self.y, self.width, self.height)


class Text(_NodeBase):
    """A single line of text; ``y`` is the baseline."""

    kind: Literal["text"] = "text"
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    font_size: float = 12.0
    font_style: str = "regular"
    fill: Optional[SolidColor] = None

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.x, self.y - self.font_size, 0.0, self.font_size)


class Group(_NodeBase):
    """Container whose bounds are the union of its children's."""

    kind: Literal["group"] = "group"
    children: List["Node"] = Field(default_factory=list)

    @property
    def bounds(self) -> Bounds:
        boxes = [child.bounds for child in self.children]
        if not boxes:
            return Bounds(0.0, 0.0, 0.0, 0.0)
        left = min(b.x for b in boxes)
        top = min(b.y for b in boxes)
        right = max(b.x + b.width for b in boxes)
        bottom = max(b.y + b.height for b in boxes)
        return Bounds(left, top, right - left, bottom - top)


Node = Annotated[Union[Rectangle, Text, Group], Field(discriminator="kind")]

Group.model_rebuild()


class Artboard(BaseModel):
    """Top-level frame; children use artboard-relative coordinates."""

    guid: str = Field(default_factory=_new_guid)
    name: str = "Artboard"
    width: float
    height: float
    fill: Optional[Fill] = Field(default_factory=lambda: SolidColor(color="#FFFFFF"))
    children: List[Node] = Field(default_factory=list)

    @property
    def bounds(self) -> Bounds:
        return Bounds(0.0, 0.0, self.width, self.height)


class Document(BaseModel):
    """
    A design document.

    Attributes:
        artboards: Artboards in document order.
        selection: Guids of the selected items.
    """

    artboards: List[Artboard] = Field(default_factory=list)
    selection: List[str] = Field(default_factory=list)


Container = Union[Artboard, Group]


def load_document(path: str) -> Document:
    with open(path, "r", encoding="utf-8") as f:
        return Document.model_validate_json(f.read())


def save_document(document: Document, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(document.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# Mutation capability
# ---------------------------------------------------------------------------


class SceneEditor:
    """
    Scene-graph operations used by the workflow.

    Args:
        document: The document being edited in place.
    """

    def __init__(self, document: Document):
        self.document = document

    # -- Selection --

    def select(self, *guids: str) -> None:
        self.document.selection = list(guids)

    def select_artboard(self, name: str) -> Optional[Artboard]:
        """Select the first artboard called ``name``; None when absent."""
        for artboard in self.document.artboards:
            if artboard.name == name:
                self.select(artboard.guid)
                return artboard
        return None

    def selected_artboard(self) -> Optional[Artboard]:
        """Return the first selected artboard, or None."""
        by_guid = {a.guid: a for a in self.document.artboards}
        for guid in self.document.selection:
            if guid in by_guid:
                return by_guid[guid]
        return None

    # -- Lookup --

    def _containers(self) -> Iterator[Container]:
        stack: List[Container] = list(self.document.artboards)
        while stack:
            container = stack.pop()
            yield container
            stack.extend(c for c in container.children if isinstance(c, Group))

    def parent_of(self, node) -> Optional[Container]:
        for container in self._containers():
            if any(child is node for child in container.children):
                return container
        return None

    # -- Mutations --

    def add_child(self, parent: Container, node) -> None:
        parent.children.append(node)

    def remove(self, node) -> None:
        """Remove ``node`` from its parent (no-op if already detached)."""
        parent = self.parent_of(node)
        if parent is None:
            return
        parent.children = [c for c in parent.children if c is not node]

    def move_in_parent(self, node, x: float, y: float) -> None:
        """Move a node so its bounds' top-left lands on (x, y)."""
        if isinstance(node, Group):
            current = node.bounds
            dx, dy = x - current.x, y - current.y
            for child in node.children:
                self.move_in_parent(child, child.bounds.x + dx, child.bounds.y + dy)
        elif isinstance(node, Text):
            node.x = x
            node.y = y + node.font_size
        else:
            node.x = x
            node.y = y

    def group(self, nodes: Sequence, name: str = "Group") -> Group:
        """
        Wrap ``nodes`` (siblings) in a new Group placed in their parent.

        Raises:
            ValueError: If ``nodes`` is empty or a node has no parent.
        """
        if not nodes:
            raise ValueError("Cannot group an empty selection")
        parent = self.parent_of(nodes[0])
        if parent is None:
            raise ValueError(f"Node {nodes[0].guid} is not in the document")

        for node in nodes:
            self.remove(node)
        group = Group(name=name, children=list(nodes))
        self.add_child(parent, group)
        self.select(group.guid)
        return group

    def hide(self, node) -> None:
        node.visible = False

    def lock(self, node) -> None:
        node.locked = True

    def rename(self, node, name: str) -> None:
        node.name = name
