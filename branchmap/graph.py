"""Authoritative node/edge model and its structural mutations."""

import uuid
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from branchmap.models import Edge, Node, Position, ROOT_ID, PLACEHOLDER_LABEL


class RootDeletionError(Exception):
    """Raised when something tries to delete the root node."""

    def __init__(self, message: str = "Cannot delete the root node."):
        super().__init__(message)


def child_map(edges: Iterable[Edge]) -> Dict[str, List[str]]:
    """Build a source -> [target, ...] adjacency map, keeping edge order."""
    children: Dict[str, List[str]] = {}
    for edge in edges:
        children.setdefault(edge.source, []).append(edge.target)
    return children


def walk_descendants(node_id: str, children: Dict[str, List[str]]) -> Set[str]:
    """Breadth-first walk of an adjacency map starting below node_id.

    The start node is never part of the result, and every id is visited
    at most once so a cyclic map still terminates.
    """
    descendants: Set[str] = set()
    queue = deque([node_id])
    while queue:
        current = queue.popleft()
        for child_id in children.get(current, ()):
            if child_id == node_id or child_id in descendants:
                continue
            descendants.add(child_id)
            queue.append(child_id)
    return descendants


def descendants_of(node_id: str, edges: Iterable[Edge]) -> Set[str]:
    """Return every id reachable from node_id along outgoing edges."""
    return walk_descendants(node_id, child_map(edges))


class GraphStore:
    """Owns every node and edge of a mind map, hidden or not.

    The store is the only holder of node data. Views handed to the canvas
    are rebuilt from it and never written back.
    """

    CHILD_X_OFFSET = 200
    CHILD_Y_SPACING = 75

    def __init__(self, nodes: Optional[Iterable[Node]] = None,
                 edges: Optional[Iterable[Edge]] = None,
                 child_x_offset: float = CHILD_X_OFFSET,
                 child_y_spacing: float = CHILD_Y_SPACING,
                 placeholder_label: str = PLACEHOLDER_LABEL):
        self.nodes: List[Node] = list(nodes or [])
        self.edges: List[Edge] = list(edges or [])
        self.child_x_offset = child_x_offset
        self.child_y_spacing = child_y_spacing
        self.placeholder_label = placeholder_label

        if not self.has_node(ROOT_ID):
            raise ValueError(f"A mind map needs a node with id '{ROOT_ID}'")

    @classmethod
    def from_payload(cls, payload: dict, **kwargs) -> "GraphStore":
        """Rebuild a store from a saved payload (positions are not saved)."""
        nodes = [Node(id=str(n["id"]), label=n.get("label", "")) for n in payload.get("nodes", [])]
        edges = [Edge.between(str(e["source"]), str(e["target"])) for e in payload.get("edges", [])]
        return cls(nodes, edges, **kwargs)

    # ==================== Read accessors ====================

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def child_edges_of(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source == node_id]

    def child_ids_of(self, node_id: str) -> List[str]:
        return [e.target for e in self.edges if e.source == node_id]

    def descendants_of(self, node_id: str) -> Set[str]:
        return descendants_of(node_id, self.edges)

    # ==================== Mutations ====================

    def add_child(self, parent_id: str) -> Optional[str]:
        """Append a placeholder child under parent_id and return its id.

        Returns None, and changes nothing, if the parent does not exist.
        """
        parent = self.get_node(parent_id)
        if parent is None:
            logger.debug(f"add_child ignored: parent {parent_id!r} not found")
            return None

        new_id = str(uuid.uuid4())

        # Spread siblings vertically around the parent's row
        sibling_count = len(self.child_edges_of(parent_id))
        spacing = self.child_y_spacing
        position = Position(
            x=parent.position.x + self.child_x_offset,
            y=parent.position.y + sibling_count * spacing
              - (max(sibling_count - 1, 0) * spacing) / 2,
        )

        node = Node(
            id=new_id,
            label=self.placeholder_label,
            position=position,
            parent_link_side=parent.parent_link_side,
            child_link_side=parent.child_link_side,
        )
        self.nodes.append(node)
        self.edges.append(Edge.between(parent_id, new_id))

        logger.info(f"Added node {new_id} under {parent_id!r}")
        return new_id

    def delete_subtree(self, node_id: str, hidden=None) -> Set[str]:
        """Remove node_id, its descendants, and every edge touching them.

        `hidden` is an optional VisibilitySet to prune of the removed ids.
        Returns the removed ids (empty if node_id is unknown).

        Raises:
            RootDeletionError: if node_id is the root.
        """
        if node_id == ROOT_ID:
            raise RootDeletionError()

        if not self.has_node(node_id):
            logger.debug(f"delete_subtree ignored: node {node_id!r} not found")
            return set()

        to_delete = {node_id} | self.descendants_of(node_id)

        self.nodes = [n for n in self.nodes if n.id not in to_delete]
        self.edges = [
            e for e in self.edges
            if e.source not in to_delete and e.target not in to_delete
        ]

        if hidden is not None:
            hidden.prune(to_delete)

        logger.info(f"Deleted subtree at {node_id!r} ({len(to_delete)} nodes)")
        return to_delete

    def relabel(self, node_id: str, new_label: str) -> bool:
        """Rename a node. Empty or unchanged labels leave it as it was."""
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"relabel ignored: node {node_id!r} not found")
            return False

        label = (new_label or "").strip()
        if not label or label == node.label:
            return False

        node.label = label
        logger.info(f"Relabeled {node_id!r}")
        return True

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Store a hand-dragged position; the next layout pass overrides it."""
        node = self.get_node(node_id)
        if node is None:
            return False
        node.position = Position(x, y)
        return True

    # ==================== Persistence ====================

    def to_payload(self) -> dict:
        """Minimal save payload. Positions are recomputed, not saved."""
        return {
            "nodes": [{"id": n.id, "label": n.label} for n in self.nodes],
            "edges": [{"source": e.source, "target": e.target} for e in self.edges],
        }
