"""Tests for the visible projection."""

from branchmap.models import Mode, PLACEHOLDER_LABEL
from branchmap.projection import NodeCallbacks, project


def _ids(projection):
    return {n.id for n in projection.visible_nodes}


def _edge_pairs(projection):
    return {(e.source, e.target) for e in projection.visible_edges}


class TestProject:

    def test_everything_visible_by_default(self, chain_store, hidden):
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW)
        assert _ids(view) == {"root", "A", "B"}
        assert len(view.visible_edges) == 2

    def test_collapse_scenario(self, chain_store, hidden):
        hidden.toggle_collapse("A", chain_store)
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW)

        assert _ids(view) == {"root", "A"}
        assert all("B" not in pair for pair in _edge_pairs(view))
        assert _edge_pairs(view) == {("root", "A")}

        hidden.toggle_collapse("A", chain_store)
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW)
        assert _ids(view) == {"root", "A", "B"}
        assert len(view.visible_edges) == 2

    def test_edges_need_both_endpoints(self, chain_store):
        # Inconsistent hidden set: the parent is hidden but the child is not
        view = project(chain_store.nodes, chain_store.edges, {"A"}, Mode.VIEW)
        assert _ids(view) == {"root", "B"}
        assert view.visible_edges == ()

    def test_idempotent(self, chain_store, hidden):
        hidden.toggle_collapse("A", chain_store)
        first = project(chain_store.nodes, chain_store.edges, hidden, Mode.EDIT)
        second = project(chain_store.nodes, chain_store.edges, hidden, Mode.EDIT)
        assert first == second

    def test_decorations(self, chain_store, hidden):
        hidden.toggle_collapse("A", chain_store)
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.EDIT)

        a = view.get("A")
        assert a.is_collapsed is True
        assert a.children_count == 1
        assert a.mode is Mode.EDIT
        assert a.can_delete is True

        root = view.get("root")
        assert root.is_collapsed is False
        assert root.children_count == 2
        assert root.can_delete is False

    def test_view_mode_cannot_delete(self, chain_store, hidden):
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW)
        assert not any(n.can_delete for n in view.visible_nodes)

    def test_positions_and_sides_copied(self, chain_store, hidden):
        node = chain_store.get_node("B")
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW).get("B")
        assert (view.x, view.y) == (node.position.x, node.position.y)
        assert view.parent_link_side is node.parent_link_side
        assert view.child_link_side is node.child_link_side

    def test_callbacks_bound_into_views(self, chain_store, hidden):
        calls = []
        callbacks = NodeCallbacks(
            on_toggle_collapse=lambda i: calls.append(("toggle", i)),
            on_add_node=lambda i: calls.append(("add", i)),
            on_delete_node=lambda i: calls.append(("delete", i)),
            on_label_change=lambda i, label: calls.append(("rename", i, label)),
        )
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.EDIT, callbacks)
        a = view.get("A")

        a.toggle_collapse()
        a.add_child()
        a.delete()
        a.rename(PLACEHOLDER_LABEL)

        assert calls == [
            ("toggle", "A"), ("add", "A"), ("delete", "A"), ("rename", "A", PLACEHOLDER_LABEL),
        ]

    def test_views_do_not_alias_store(self, chain_store, hidden):
        view = project(chain_store.nodes, chain_store.edges, hidden, Mode.VIEW)
        chain_store.relabel("A", "Changed")
        assert view.get("A").label == "A"
