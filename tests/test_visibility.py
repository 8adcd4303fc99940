"""Tests for collapse state."""

from branchmap.graph import GraphStore
from branchmap.models import Edge, Node
from branchmap.visibility import CollapseEvaluator, VisibilitySet


def _deep_store():
    """root -> A -> B -> C"""
    nodes = [Node(id=i) for i in ("root", "A", "B", "C")]
    edges = [Edge.between("root", "A"), Edge.between("A", "B"), Edge.between("B", "C")]
    return GraphStore(nodes, edges)


class TestCollapseEvaluator:

    def test_leaf_is_never_collapsed(self, chain_store):
        for hidden in (set(), {"B"}, {"A", "B"}, {"root", "A", "B"}):
            assert CollapseEvaluator(chain_store.edges, hidden).is_collapsed("B") is False

    def test_collapsed_when_all_children_hidden(self, chain_store):
        evaluator = CollapseEvaluator(chain_store.edges, {"B"})
        assert evaluator.is_collapsed("A") is True
        assert evaluator.is_collapsed("root") is False

    def test_partially_hidden_children_not_collapsed(self):
        edges = [Edge.between("root", "x"), Edge.between("root", "y")]
        assert CollapseEvaluator(edges, {"x"}).is_collapsed("root") is False
        assert CollapseEvaluator(edges, {"x", "y"}).is_collapsed("root") is True

    def test_descendant_count(self, chain_store):
        evaluator = CollapseEvaluator(chain_store.edges, set())
        assert evaluator.descendant_count("root") == 2
        assert evaluator.descendant_count("A") == 1
        assert evaluator.descendant_count("B") == 0


class TestVisibilitySet:

    def test_collapse_hides_all_descendants(self, chain_store, hidden):
        assert hidden.toggle_collapse("root", chain_store) is True
        assert hidden.snapshot() == frozenset({"A", "B"})

    def test_collapse_then_expand_restores(self, chain_store, hidden):
        hidden.toggle_collapse("A", chain_store)
        assert hidden.snapshot() == frozenset({"B"})

        assert hidden.toggle_collapse("A", chain_store) is False
        assert len(hidden) == 0

    def test_toggle_leaf_is_noop(self, chain_store, hidden):
        assert hidden.toggle_collapse("B", chain_store) is None
        assert len(hidden) == 0

    def test_toggle_unknown_is_noop(self, chain_store, hidden):
        assert hidden.toggle_collapse("ghost", chain_store) is None
        assert len(hidden) == 0

    def test_expand_reveals_only_direct_children(self):
        store = _deep_store()
        hidden = VisibilitySet()

        hidden.toggle_collapse("root", store)
        assert hidden.snapshot() == frozenset({"A", "B", "C"})

        hidden.toggle_collapse("root", store)
        assert hidden.snapshot() == frozenset({"B", "C"})
        # A now shows as collapsed, so toggling it expands one more level
        assert CollapseEvaluator(store.edges, hidden).is_collapsed("A") is True

    def test_nested_collapse_not_fully_restored(self):
        store = _deep_store()
        hidden = VisibilitySet()

        hidden.toggle_collapse("B", store)  # hides C
        hidden.toggle_collapse("A", store)  # hides B, C
        hidden.toggle_collapse("A", store)  # reveals B only

        assert hidden.snapshot() == frozenset({"C"})
        assert CollapseEvaluator(store.edges, hidden).is_collapsed("B") is True

    def test_toggle_swaps_whole_set(self, chain_store, hidden):
        before = hidden.snapshot()
        hidden.toggle_collapse("A", chain_store)
        assert before == frozenset()
        assert hidden.snapshot() is not before

    def test_prune(self):
        hidden = VisibilitySet({"a", "b", "c"})
        hidden.prune(["a", "zzz"])
        assert set(hidden) == {"b", "c"}
