"""Visible projection of the mind map handed to the rendering surface."""

from dataclasses import dataclass, field
from typing import Callable, Container, Iterable, Optional, Tuple

from branchmap.models import Edge, LinkSide, Mode, Node, ROOT_ID
from branchmap.visibility import CollapseEvaluator


@dataclass(frozen=True)
class NodeCallbacks:
    """Mutation entry points bound into every visible node."""
    on_toggle_collapse: Callable[[str], None]
    on_add_node: Callable[[str], None]
    on_delete_node: Callable[[str], None]
    on_label_change: Callable[[str, str], None]


@dataclass(frozen=True)
class NodeView:
    """A visible node decorated with everything the canvas needs to draw it."""
    id: str
    label: str
    x: float
    y: float
    parent_link_side: LinkSide
    child_link_side: LinkSide
    mode: Mode
    is_collapsed: bool
    children_count: int
    callbacks: Optional[NodeCallbacks] = field(default=None, compare=False, repr=False)

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ID

    @property
    def can_collapse(self) -> bool:
        return self.children_count > 0

    @property
    def can_delete(self) -> bool:
        return self.mode is Mode.EDIT and not self.is_root

    def toggle_collapse(self):
        if self.callbacks:
            self.callbacks.on_toggle_collapse(self.id)

    def add_child(self):
        if self.callbacks:
            self.callbacks.on_add_node(self.id)

    def delete(self):
        if self.callbacks:
            self.callbacks.on_delete_node(self.id)

    def rename(self, new_label: str):
        if self.callbacks:
            self.callbacks.on_label_change(self.id, new_label)


@dataclass(frozen=True)
class ViewProjection:
    """The node/edge subset currently eligible for display."""
    visible_nodes: Tuple[NodeView, ...] = ()
    visible_edges: Tuple[Edge, ...] = ()

    @property
    def node_ids(self) -> frozenset:
        return frozenset(n.id for n in self.visible_nodes)

    def get(self, node_id: str) -> Optional[NodeView]:
        for view in self.visible_nodes:
            if view.id == node_id:
                return view
        return None


def project(nodes: Iterable[Node], edges: Iterable[Edge], hidden: Container[str],
            mode: Mode, callbacks: Optional[NodeCallbacks] = None) -> ViewProjection:
    """Filter out hidden nodes and any edge touching one, then decorate.

    An edge is kept only when both endpoints are visible, which is what
    hides the connectors of a collapsed subtree.
    """
    nodes = list(nodes)
    edges = list(edges)

    visible_nodes = [n for n in nodes if n.id not in hidden]
    visible_ids = {n.id for n in visible_nodes}
    visible_edges = tuple(
        e for e in edges
        if e.source in visible_ids and e.target in visible_ids
    )

    evaluator = CollapseEvaluator(edges, hidden)
    views = tuple(
        NodeView(
            id=node.id,
            label=node.label,
            x=node.position.x,
            y=node.position.y,
            parent_link_side=node.parent_link_side,
            child_link_side=node.child_link_side,
            mode=mode,
            is_collapsed=evaluator.is_collapsed(node.id),
            children_count=evaluator.descendant_count(node.id),
            callbacks=callbacks,
        )
        for node in visible_nodes
    )
    return ViewProjection(visible_nodes=views, visible_edges=visible_edges)
