"""Initial map data: nested seed trees and the bundled demo map."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set, Tuple, Union

from branchmap.models import Edge, Node, Position, ROOT_ID


SEED_X_STEP = 200
SEED_Y_STEP = 75


@dataclass
class SeedNode:
    """A node of a nested seed tree."""
    id: str
    label: str
    children: List["SeedNode"] = field(default_factory=list)


def _parse_seed_node(data: dict) -> SeedNode:
    try:
        node_id = str(data["id"])
    except (KeyError, TypeError):
        raise ValueError(f"Seed node without an id: {data!r}") from None
    return SeedNode(id=node_id, label=str(data.get("label", "")))


def seed_from_dict(data: dict) -> SeedNode:
    """Parse a nested {id, label, children?} mapping."""
    root = _parse_seed_node(data)
    stack = [(root, data)]
    while stack:
        item, raw = stack.pop()
        for child_data in raw.get("children") or []:
            child = _parse_seed_node(child_data)
            item.children.append(child)
            stack.append((child, child_data))
    return root


def flatten_seed(seed: SeedNode) -> Tuple[List[Node], List[Edge]]:
    """Turn a seed tree into flat node and edge lists.

    Positions are provisional (depth columns, one row per leaf) and are
    replaced by the first layout pass.
    """
    if seed.id != ROOT_ID:
        raise ValueError(f"Seed tree must start at '{ROOT_ID}', got {seed.id!r}")

    nodes: List[Node] = []
    edges: List[Edge] = []
    seen: Set[str] = set()
    leaf_row = 0

    # Pre-order walk; children are pushed reversed to keep their order
    stack = [(seed, 0, None)]
    while stack:
        item, depth, parent_id = stack.pop()
        if item.id in seen:
            raise ValueError(f"Duplicate node id in seed: {item.id!r}")
        seen.add(item.id)

        nodes.append(Node(
            id=item.id,
            label=item.label,
            position=Position(depth * SEED_X_STEP, leaf_row * SEED_Y_STEP),
        ))
        if parent_id is not None:
            edges.append(Edge.between(parent_id, item.id))

        if not item.children:
            leaf_row += 1
        for child in reversed(item.children):
            stack.append((child, depth + 1, item.id))

    return nodes, edges


def load_seed_file(path: Union[str, Path]) -> SeedNode:
    """Read a seed tree from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: seed must be a JSON object")
    return seed_from_dict(data)


DEFAULT_SEED = seed_from_dict({
    "id": "root",
    "label": "Campus Circle",
    "children": [
        {
            "id": "1",
            "label": "Home",
            "children": [
                {
                    "id": "1-1",
                    "label": "Trending Topics",
                    "children": [
                        {
                            "id": "1-1-1",
                            "label": "Topic Picker",
                            "children": [{"id": "1-1-1-1", "label": "Topic Overview"}],
                        },
                    ],
                },
                {
                    "id": "1-2",
                    "label": "Discover Topics",
                    "children": [{"id": "1-2-1", "label": "Topic Picker"}],
                },
            ],
        },
        {"id": "2", "label": "Friends' Topics"},
        {"id": "3", "label": "Start a Topic"},
        {"id": "4", "label": "Search"},
        {"id": "5", "label": "Confession Wall"},
        {"id": "6", "label": "Messages"},
        {
            "id": "7",
            "label": "Nearby",
            "children": [
                {"id": "7-1", "label": "Nearby Posts"},
                {"id": "7-2", "label": "People Nearby"},
            ],
        },
        {"id": "8", "label": "Me"},
        {"id": "9", "label": "Settings"},
    ],
})
