"""The editing session: one graph, its collapse state, mode, and save cycle."""

from typing import Callable, Optional

from loguru import logger

from branchmap.config import Settings
from branchmap.graph import GraphStore, RootDeletionError
from branchmap.layout import LayoutAdapter
from branchmap.models import LayoutDirection, Mode
from branchmap.persistence import SimulatedSaveBackend
from branchmap.projection import NodeCallbacks, ViewProjection, project
from branchmap.seed import SeedNode, flatten_seed
from branchmap.visibility import VisibilitySet


SAVE_FAILED_NOTICE = "Error saving mind map."
SAVE_BUSY_NOTICE = "A save is already in progress."


class MindMapSession:
    """Owns the mind map and routes every mutation through one place.

    Each mutation runs in the same order: change the store, fix up the
    hidden set, rebuild the view. The canvas only ever reads `view`.
    """

    def __init__(self, store: GraphStore, settings: Optional[Settings] = None,
                 backend=None, layout_adapter: Optional[LayoutAdapter] = None):
        self.settings = settings or Settings()
        self.store = store
        self.hidden = VisibilitySet()
        self.mode = Mode.VIEW
        self.direction = self.settings.direction
        self.backend = backend or SimulatedSaveBackend(delay_ms=self.settings.save_delay_ms)
        self.layout_adapter = layout_adapter or LayoutAdapter.from_settings(self.settings)

        self.pending_rename: Optional[str] = None
        self.view = ViewProjection()
        self._save_in_flight = False

        self.callbacks = NodeCallbacks(
            on_toggle_collapse=self.on_toggle_collapse,
            on_add_node=self.on_add_node,
            on_delete_node=self.on_delete_node,
            on_label_change=self.on_label_change,
        )

        # Listeners
        self.on_view_changed: Optional[Callable[[ViewProjection], None]] = None
        self.on_notice: Optional[Callable[[str], None]] = None
        self.on_mode_changed: Optional[Callable[[Mode], None]] = None
        self.on_saved: Optional[Callable[[], None]] = None
        self.on_layout_applied: Optional[Callable[[], None]] = None

    @classmethod
    def from_seed(cls, seed: SeedNode, settings: Optional[Settings] = None,
                  **kwargs) -> "MindMapSession":
        settings = settings or Settings()
        nodes, edges = flatten_seed(seed)
        store = GraphStore(
            nodes, edges,
            child_x_offset=settings.child_x_offset,
            child_y_spacing=settings.child_y_spacing,
            placeholder_label=settings.placeholder_label,
        )
        session = cls(store, settings=settings, **kwargs)
        session.apply_layout()
        return session

    @classmethod
    def from_payload(cls, payload: dict, settings: Optional[Settings] = None,
                     **kwargs) -> "MindMapSession":
        settings = settings or Settings()
        store = GraphStore.from_payload(
            payload,
            child_x_offset=settings.child_x_offset,
            child_y_spacing=settings.child_y_spacing,
            placeholder_label=settings.placeholder_label,
        )
        session = cls(store, settings=settings, **kwargs)
        session.apply_layout()
        return session

    @property
    def is_editing(self) -> bool:
        return self.mode is Mode.EDIT

    @property
    def is_saving(self) -> bool:
        return self._save_in_flight

    # ==================== View ====================

    def recompute_view(self) -> ViewProjection:
        self.view = project(
            self.store.nodes, self.store.edges, self.hidden, self.mode, self.callbacks
        )
        if self.on_view_changed:
            self.on_view_changed(self.view)
        return self.view

    def _notify(self, message: str):
        if self.on_notice:
            self.on_notice(message)

    # ==================== Node callbacks ====================

    def on_toggle_collapse(self, node_id: str):
        """Collapse or expand a node. Allowed in both modes."""
        if self.hidden.toggle_collapse(node_id, self.store) is None:
            return
        self.recompute_view()

    def on_add_node(self, parent_id: str):
        if not self.is_editing:
            logger.debug(f"add ignored in {self.mode.value} mode")
            return
        new_id = self.store.add_child(parent_id)
        if new_id is None:
            return
        self.pending_rename = new_id
        self.recompute_view()

    def on_delete_node(self, node_id: str):
        if not self.is_editing:
            logger.debug(f"delete ignored in {self.mode.value} mode")
            return
        try:
            removed = self.store.delete_subtree(node_id, self.hidden)
        except RootDeletionError as exc:
            logger.warning(f"Refused to delete {node_id!r}: {exc}")
            self._notify(str(exc))
            return
        if not removed:
            return
        if self.pending_rename in removed:
            self.pending_rename = None
        self.recompute_view()

    def on_label_change(self, node_id: str, new_label: str):
        if not self.is_editing:
            logger.debug(f"rename ignored in {self.mode.value} mode")
            return
        if node_id == self.pending_rename:
            self.pending_rename = None
        if self.store.relabel(node_id, new_label):
            self.recompute_view()

    def on_node_moved(self, node_id: str, x: float, y: float):
        """Keep a hand-dragged position until the next layout pass."""
        if not self.is_editing:
            return
        if self.store.move_node(node_id, x, y):
            self.recompute_view()

    # ==================== Mode ====================

    def _switch_mode(self, mode: Mode):
        if mode is self.mode:
            return
        self.mode = mode
        self.pending_rename = None
        logger.info(f"Mode is now {mode.value}")
        if self.on_mode_changed:
            self.on_mode_changed(mode)
        self.recompute_view()

    def set_mode(self, mode):
        """Switch mode. Leaving edit mode this way keeps edits (like cancel)."""
        mode = Mode.parse(mode)
        if mode is Mode.EDIT:
            self.enter_edit()
        else:
            self.cancel_edit()

    def enter_edit(self):
        self._switch_mode(Mode.EDIT)

    def cancel_edit(self):
        """Back to view mode. Edits stay in the store and no layout runs."""
        if not self.is_editing:
            return
        self._switch_mode(Mode.VIEW)

    # ==================== Save ====================

    def save(self) -> bool:
        """Commit the map to the backend.

        Returns False when the save was not started (not editing, or a save
        is already in flight). Completion is reported via the listeners.
        """
        if not self.is_editing:
            logger.debug("save ignored outside edit mode")
            return False
        if self._save_in_flight:
            logger.warning("save refused: a save is already in flight")
            self._notify(SAVE_BUSY_NOTICE)
            return False

        payload = self.store.to_payload()
        self._save_in_flight = True
        logger.info(f"Saving {len(payload['nodes'])} nodes, {len(payload['edges'])} edges")
        self.backend.save(payload, self._on_save_finished)
        return True

    def _on_save_finished(self, error: Optional[Exception]):
        self._save_in_flight = False

        if error is not None:
            logger.error(f"Failed to save mind map: {error}")
            self._notify(SAVE_FAILED_NOTICE)
            return

        logger.info("Mind map saved")
        self.layout_adapter.apply(self.store, self.direction)
        self._switch_mode(Mode.VIEW)
        # Positions changed even if the mode was already view
        self.recompute_view()
        if self.on_layout_applied:
            self.on_layout_applied()
        if self.on_saved:
            self.on_saved()

    # ==================== Layout ====================

    def apply_layout(self, direction=None):
        if direction is not None:
            self.direction = LayoutDirection.parse(direction)
            self.settings.layout_direction = self.direction.value
        self.layout_adapter.apply(self.store, self.direction)
        self.recompute_view()
        if self.on_layout_applied:
            self.on_layout_applied()

    def set_direction(self, direction):
        """Change the flow direction and lay the map out again."""
        self.apply_layout(direction)
