"""Shared fixtures for the BranchMap test suite."""

import pytest

from branchmap.config import Settings
from branchmap.database import Database
from branchmap.graph import GraphStore
from branchmap.models import Edge, Node, Position
from branchmap.persistence import SimulatedSaveBackend
from branchmap.seed import DEFAULT_SEED
from branchmap.session import MindMapSession
from branchmap.visibility import VisibilitySet


class ManualScheduler:
    """Collects scheduled callbacks so a test decides when they fire."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay_ms, callback):
        self.pending.append((delay_ms, callback))

    def run_all(self):
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


def make_chain():
    """root -> A -> B"""
    nodes = [
        Node(id="root", label="Root", position=Position(0, 0)),
        Node(id="A", label="A", position=Position(200, 0)),
        Node(id="B", label="B", position=Position(400, 0)),
    ]
    edges = [Edge.between("root", "A"), Edge.between("A", "B")]
    return nodes, edges


@pytest.fixture
def chain_store():
    nodes, edges = make_chain()
    return GraphStore(nodes, edges)


@pytest.fixture
def hidden():
    return VisibilitySet()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def chain_session(chain_store):
    """A session on root -> A -> B whose saves complete synchronously."""
    return MindMapSession(chain_store, backend=SimulatedSaveBackend(delay_ms=0))


@pytest.fixture
def seed_session():
    return MindMapSession.from_seed(DEFAULT_SEED, settings=Settings())


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "test.db")
    yield database
    database.close()
