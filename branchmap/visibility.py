"""Collapse state: the hidden-id set and the flags derived from it."""

from typing import Container, FrozenSet, Iterable, Iterator, Optional, Sequence

from loguru import logger

from branchmap.graph import GraphStore, child_map, walk_descendants
from branchmap.models import Edge


class CollapseEvaluator:
    """Derives per-node collapse flags from the edges and the hidden set.

    Nothing here is cached on the nodes, so the flags always match the
    hidden set they were computed against.
    """

    def __init__(self, edges: Sequence[Edge], hidden: Container[str]):
        self._children = child_map(edges)
        self._hidden = hidden

    def direct_children(self, node_id: str) -> Sequence[str]:
        return self._children.get(node_id, ())

    def is_collapsed(self, node_id: str) -> bool:
        """A node is collapsed when it has children and all are hidden."""
        children = self.direct_children(node_id)
        if not children:
            return False
        return all(child_id in self._hidden for child_id in children)

    def descendants(self, node_id: str) -> set:
        return walk_descendants(node_id, self._children)

    def descendant_count(self, node_id: str) -> int:
        return len(self.descendants(node_id))


class VisibilitySet:
    """Ids of nodes currently excluded from display.

    Membership follows from collapse decisions only; a hidden node still
    exists in the GraphStore. The set is swapped wholesale on every change
    so readers never see a half-applied toggle.
    """

    def __init__(self, hidden: Optional[Iterable[str]] = None):
        self._hidden: FrozenSet[str] = frozenset(hidden or ())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._hidden

    def __iter__(self) -> Iterator[str]:
        return iter(self._hidden)

    def __len__(self) -> int:
        return len(self._hidden)

    def snapshot(self) -> FrozenSet[str]:
        return self._hidden

    def prune(self, node_ids: Iterable[str]):
        """Forget ids, e.g. of nodes that were just deleted."""
        self._hidden = self._hidden - frozenset(node_ids)

    def toggle_collapse(self, node_id: str, store: GraphStore) -> Optional[bool]:
        """Collapse or expand node_id.

        Collapsing hides every descendant. Expanding reveals only the direct
        children; grandchildren hidden by a deeper collapse stay hidden.

        Returns True if the node is now collapsed, False if it was expanded,
        None if nothing changed (unknown node or no descendants).
        """
        if not store.has_node(node_id):
            logger.debug(f"toggle_collapse ignored: node {node_id!r} not found")
            return None

        evaluator = CollapseEvaluator(store.edges, self._hidden)
        descendants = evaluator.descendants(node_id)
        if not descendants:
            return None

        if evaluator.is_collapsed(node_id):
            children = evaluator.direct_children(node_id)
            self._hidden = self._hidden - frozenset(children)
            logger.debug(f"Expanded {node_id!r}, revealed {len(children)} children")
            return False

        self._hidden = self._hidden | frozenset(descendants)
        logger.debug(f"Collapsed {node_id!r}, hid {len(descendants)} descendants")
        return True
