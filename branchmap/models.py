"""Core data types shared by the graph engine and the canvas."""

from dataclasses import dataclass, field
from enum import Enum


ROOT_ID = "root"
PLACEHOLDER_LABEL = "New Topic"


class LinkSide(Enum):
    """Side of a node box where an edge attaches."""
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class LayoutDirection(Enum):
    """Flow direction of the tree layout."""
    LEFT_RIGHT = "LR"
    TOP_BOTTOM = "TB"

    @property
    def is_horizontal(self) -> bool:
        return self is LayoutDirection.LEFT_RIGHT

    @property
    def parent_side(self) -> LinkSide:
        """Side on which the incoming (parent) edge attaches."""
        return LinkSide.LEFT if self.is_horizontal else LinkSide.TOP

    @property
    def child_side(self) -> LinkSide:
        """Side from which outgoing (child) edges leave."""
        return LinkSide.RIGHT if self.is_horizontal else LinkSide.BOTTOM

    @classmethod
    def parse(cls, value) -> "LayoutDirection":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        aliases = {
            "lr": cls.LEFT_RIGHT, "leftright": cls.LEFT_RIGHT, "horizontal": cls.LEFT_RIGHT,
            "tb": cls.TOP_BOTTOM, "topbottom": cls.TOP_BOTTOM, "vertical": cls.TOP_BOTTOM,
        }
        try:
            return aliases[text.lower().replace("_", "").replace("-", "")]
        except KeyError:
            raise ValueError(f"Unknown layout direction: {value!r}") from None


class Mode(Enum):
    """Session-wide interaction mode."""
    VIEW = "view"
    EDIT = "edit"

    @classmethod
    def parse(cls, value) -> "Mode":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass
class Position:
    """Top-left corner of a node box in canvas coordinates."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Node:
    """A labeled node of the mind map."""
    id: str
    label: str = PLACEHOLDER_LABEL
    position: Position = field(default_factory=Position)
    parent_link_side: LinkSide = LinkSide.LEFT
    child_link_side: LinkSide = LinkSide.RIGHT

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ID


@dataclass(frozen=True)
class Edge:
    """A directed parent -> child connection."""
    id: str
    source: str
    target: str

    @classmethod
    def between(cls, source: str, target: str) -> "Edge":
        return cls(id=f"e-{source}-{target}", source=source, target=target)
