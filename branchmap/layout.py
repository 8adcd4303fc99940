"""Tree layout and the adapter that writes its results into the store."""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Set

from loguru import logger

from branchmap.graph import GraphStore
from branchmap.models import Edge, LayoutDirection, LinkSide, Node, Position, ROOT_ID


NODE_WIDTH = 172
NODE_HEIGHT = 36
NODE_SEP = 50
RANK_SEP = 100


@dataclass(frozen=True)
class LayoutResult:
    """Placement of a single node."""
    x: float
    y: float
    parent_link_side: LinkSide
    child_link_side: LinkSide


def layout(nodes: Sequence[Node], edges: Sequence[Edge],
           direction: LayoutDirection = LayoutDirection.LEFT_RIGHT,
           node_width: float = NODE_WIDTH, node_height: float = NODE_HEIGHT,
           node_sep: float = NODE_SEP, rank_sep: float = RANK_SEP) -> Dict[str, LayoutResult]:
    """Lay out a tree as ranked columns (LR) or rows (TB).

    Every subtree gets a band on the cross axis sized by its leaf count and
    each parent is centred on its band. Returned positions are the top-left
    corners of fixed-size boxes. The result only depends on the arguments.
    """
    direction = LayoutDirection.parse(direction)
    horizontal = direction.is_horizontal

    ids = [n.id for n in nodes]
    known = set(ids)
    children: Dict[str, List[str]] = {nid: [] for nid in ids}
    has_parent: Set[str] = set()
    for edge in edges:
        if edge.source in known and edge.target in known:
            children[edge.source].append(edge.target)
            has_parent.add(edge.target)

    if horizontal:
        slot = node_height + node_sep
        rank_step = node_width + rank_sep
    else:
        slot = node_width + node_sep
        rank_step = node_height + rank_sep

    centres: Dict[str, tuple] = {}
    visited: Set[str] = set()

    def place(top_id: str, start: float) -> float:
        """Place a subtree from slot `start`; return the slots it used.

        Stack frames are [id, depth, start, span, children iterator].
        """
        visited.add(top_id)
        stack = [[top_id, 0, start, 0.0, iter(children[top_id])]]
        total = 0.0
        while stack:
            node_id, depth, begin, span, pending = stack[-1]
            for child_id in pending:
                if child_id not in visited:
                    visited.add(child_id)
                    stack.append([child_id, depth + 1, begin + span, 0.0,
                                  iter(children[child_id])])
                    break
            else:
                stack.pop()
                span = max(span, 1.0)
                centres[node_id] = (depth * rank_step, (begin + span / 2) * slot)
                if stack:
                    stack[-1][3] += span
                else:
                    total = span
        return total

    # Root first, then any other parentless node, then leftovers from cycles
    roots = [nid for nid in ids if nid not in has_parent]
    roots.sort(key=lambda nid: nid != ROOT_ID)
    cursor = 0.0
    for node_id in roots + ids:
        if node_id not in visited:
            cursor += place(node_id, cursor)

    results: Dict[str, LayoutResult] = {}
    for node_id, (main, cross) in centres.items():
        cx, cy = (main, cross) if horizontal else (cross, main)
        results[node_id] = LayoutResult(
            x=cx - node_width / 2,
            y=cy - node_height / 2,
            parent_link_side=direction.parent_side,
            child_link_side=direction.child_side,
        )
    return results


LayoutFunc = Callable[..., Dict[str, LayoutResult]]


class LayoutAdapter:
    """Runs a layout function over the whole store and applies the result.

    Hidden nodes are laid out too, so they reappear in a sensible place when
    expanded. Calls are serialised: a second apply waits until the first has
    finished writing positions back.
    """

    def __init__(self, layout_func: LayoutFunc = layout,
                 node_width: float = NODE_WIDTH, node_height: float = NODE_HEIGHT,
                 node_sep: float = NODE_SEP, rank_sep: float = RANK_SEP):
        self.layout_func = layout_func
        self.node_width = node_width
        self.node_height = node_height
        self.node_sep = node_sep
        self.rank_sep = rank_sep
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "LayoutAdapter":
        return cls(
            node_width=settings.node_width,
            node_height=settings.node_height,
            node_sep=settings.node_sep,
            rank_sep=settings.rank_sep,
        )

    def apply(self, store: GraphStore, direction: LayoutDirection) -> Dict[str, LayoutResult]:
        with self._lock:
            results = self.layout_func(
                list(store.nodes), list(store.edges), direction,
                node_width=self.node_width, node_height=self.node_height,
                node_sep=self.node_sep, rank_sep=self.rank_sep,
            )
            for node in store.nodes:
                result = results.get(node.id)
                if result is None:
                    continue
                node.position = Position(result.x, result.y)
                node.parent_link_side = result.parent_link_side
                node.child_link_side = result.child_link_side

        logger.info(f"Layout applied ({LayoutDirection.parse(direction).value}, {len(results)} nodes)")
        return results
