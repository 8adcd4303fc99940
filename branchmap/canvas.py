"""Canvas widget that draws the visible part of the mind map."""

import math
from typing import Optional, Dict, Tuple
from dataclasses import dataclass
import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, GLib

import cairo

from branchmap.models import LinkSide, Mode
from branchmap.projection import NodeView, ViewProjection
from branchmap.session import MindMapSession


@dataclass
class NodeBox:
    """Screen-independent geometry of a visible node."""
    view: NodeView
    x: float
    y: float
    width: float
    height: float

    def contains_point(self, px: float, py: float) -> bool:
        """Check if a point is inside this node."""
        return (self.x <= px <= self.x + self.width and
                self.y <= py <= self.y + self.height)

    def anchor(self, side: LinkSide) -> Tuple[float, float]:
        """Midpoint of one side of the box."""
        if side is LinkSide.LEFT:
            return self.x, self.y + self.height / 2
        if side is LinkSide.RIGHT:
            return self.x + self.width, self.y + self.height / 2
        if side is LinkSide.TOP:
            return self.x + self.width / 2, self.y
        return self.x + self.width / 2, self.y + self.height


class MindMapCanvas(Gtk.DrawingArea):
    """Custom canvas widget for rendering a mind map session."""

    # Colors (matching theme.css)
    COLORS = {
        'bg_primary': (0.039, 0.039, 0.039),      # #0a0a0a
        'bg_secondary': (0.078, 0.078, 0.078),    # #141414
        'surface': (0.118, 0.118, 0.118),         # #1e1e1e
        'surface_hover': (0.145, 0.145, 0.145),   # #252525
        'border_subtle': (0.165, 0.165, 0.165),   # #2a2a2a
        'border_active': (0.302, 0.651, 1.0),     # #4da6ff
        'text_primary': (0.878, 0.878, 0.878),    # #e0e0e0
        'text_muted': (0.333, 0.333, 0.333),      # #555555
        'accent': (0.302, 0.651, 1.0),            # #4da6ff
        'edge': (0.45, 0.45, 0.45),
        'danger': (1.0, 0.176, 0.176),            # #ff2d2d
        'grid_dots': (0.12, 0.12, 0.12),
        'root_node': (0.05, 0.09, 0.15),
        'root_border': (0.15, 0.35, 0.6),
    }

    NODE_PADDING = 12
    BADGE_RADIUS = 9
    BUTTON_RADIUS = 8
    MIN_ZOOM = 0.25
    MAX_ZOOM = 4.0

    def __init__(self, session: MindMapSession):
        super().__init__()

        self.session = session
        self.boxes: Dict[str, NodeBox] = {}

        # View state
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.is_panning = False
        self.pan_start_x = 0.0
        self.pan_start_y = 0.0
        self.last_mouse_x = 0.0
        self.last_mouse_y = 0.0
        self.hovered_id: Optional[str] = None

        # Dragging state
        self.dragging_id: Optional[str] = None
        self.drag_start_node_x = 0.0
        self.drag_start_node_y = 0.0
        self._drag_threshold = 5
        self._drag_exceeded_threshold = False
        self._drag_pending_id: Optional[str] = None

        # Inline rename state
        self.editing_id: Optional[str] = None
        self.edit_text = ""
        self.edit_cursor_pos = 0
        self.is_placeholder_text = False
        self.cursor_visible = True
        self.cursor_blink_id: Optional[int] = None

        self.show_grid = session.settings.show_grid
        self.show_minimap = session.settings.show_minimap
        self.grid_size = 30

        self.set_draw_func(self._on_draw)
        self.set_focusable(True)
        self.set_can_focus(True)
        self._setup_event_controllers()
        self.set_hexpand(True)
        self.set_vexpand(True)

        self.set_projection(session.view)

    def _setup_event_controllers(self):
        """Setup mouse and keyboard event controllers."""
        click_ctrl = Gtk.GestureClick()
        click_ctrl.set_button(1)
        click_ctrl.connect("pressed", self._on_click)
        self.add_controller(click_ctrl)

        motion_ctrl = Gtk.EventControllerMotion()
        motion_ctrl.connect("motion", self._on_motion)
        motion_ctrl.connect("leave", self._on_leave)
        self.add_controller(motion_ctrl)

        scroll_ctrl = Gtk.EventControllerScroll()
        scroll_ctrl.set_flags(Gtk.EventControllerScrollFlags.BOTH_AXES)
        scroll_ctrl.connect("scroll", self._on_scroll)
        self.add_controller(scroll_ctrl)

        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

        drag_ctrl = Gtk.GestureDrag()
        drag_ctrl.set_button(1)
        drag_ctrl.connect("drag-begin", self._on_drag_begin)
        drag_ctrl.connect("drag-update", self._on_drag_update)
        drag_ctrl.connect("drag-end", self._on_drag_end)
        self.add_controller(drag_ctrl)

    # ==================== Projection ====================

    def set_projection(self, projection: ViewProjection):
        """Rebuild the hit-test boxes from a fresh projection."""
        settings = self.session.settings
        self.boxes = {
            view.id: NodeBox(view, view.x, view.y, settings.node_width, settings.node_height)
            for view in projection.visible_nodes
        }

        if self.editing_id and (self.editing_id not in self.boxes or not self.session.is_editing):
            self._stop_editing()
        if self.hovered_id not in self.boxes:
            self.hovered_id = None

        pending = self.session.pending_rename
        if pending and pending in self.boxes and self.editing_id != pending:
            self.start_editing_placeholder(pending)

        self.queue_draw()

    # ==================== Drawing ====================

    def _on_draw(self, area, cr, width, height):
        """Main drawing function."""
        cr.save()

        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.paint()

        if self.show_grid:
            self._draw_grid(cr, width, height)

        cr.translate(self.pan_x, self.pan_y)
        cr.scale(self.zoom, self.zoom)

        # Edges first (behind nodes)
        for edge in self.session.view.visible_edges:
            source = self.boxes.get(edge.source)
            target = self.boxes.get(edge.target)
            if source and target:
                self._draw_edge(cr, source, target)

        for box in self.boxes.values():
            self._draw_node(cr, box)

        cr.restore()

        if self.show_minimap and self.boxes:
            self._draw_minimap(cr, width, height)

    def _draw_grid(self, cr, width: float, height: float):
        """Draw dot grid pattern."""
        cr.save()
        cr.set_source_rgb(*self.COLORS['grid_dots'])

        effective_grid = self.grid_size * self.zoom
        offset_x = self.pan_x % effective_grid
        offset_y = self.pan_y % effective_grid

        x = offset_x
        while x < width:
            y = offset_y
            while y < height:
                cr.arc(x, y, 1.5, 0, 2 * math.pi)
                cr.fill()
                y += effective_grid
            x += effective_grid

        cr.restore()

    def _draw_edge(self, cr, source: NodeBox, target: NodeBox):
        """Draw a right-angled connector with an arrowhead at the child."""
        start_x, start_y = source.anchor(source.view.child_link_side)
        end_x, end_y = target.anchor(target.view.parent_link_side)
        horizontal = source.view.child_link_side in (LinkSide.LEFT, LinkSide.RIGHT)

        cr.save()
        cr.set_source_rgb(*self.COLORS['edge'])
        cr.set_line_width(1.5)
        cr.set_line_join(cairo.LINE_JOIN_ROUND)

        cr.move_to(start_x, start_y)
        if horizontal:
            mid_x = (start_x + end_x) / 2
            cr.line_to(mid_x, start_y)
            cr.line_to(mid_x, end_y)
            angle = 0.0 if end_x >= mid_x else math.pi
        else:
            mid_y = (start_y + end_y) / 2
            cr.line_to(start_x, mid_y)
            cr.line_to(end_x, mid_y)
            angle = math.pi / 2 if end_y >= mid_y else -math.pi / 2
        cr.line_to(end_x, end_y)
        cr.stroke()

        # Arrowhead
        size = 7
        cr.move_to(end_x, end_y)
        cr.line_to(end_x - size * math.cos(angle - 0.45), end_y - size * math.sin(angle - 0.45))
        cr.line_to(end_x - size * math.cos(angle + 0.45), end_y - size * math.sin(angle + 0.45))
        cr.close_path()
        cr.fill()
        cr.restore()

    def _draw_node(self, cr, box: NodeBox):
        """Draw a single node with its badge and edit buttons."""
        view = box.view
        x, y, w, h = box.x, box.y, box.width, box.height
        is_hovered = self.hovered_id == view.id
        is_editing = self.editing_id == view.id

        cr.save()

        radius = 8 if view.is_root else 6
        self._draw_rounded_rect(cr, x, y, w, h, radius)

        if view.is_root:
            bg = self.COLORS['root_node']
        elif is_hovered:
            bg = self.COLORS['surface_hover']
        else:
            bg = self.COLORS['surface']
        cr.set_source_rgb(*bg)
        cr.fill_preserve()

        if is_editing:
            cr.set_source_rgb(*self.COLORS['border_active'])
            cr.set_line_width(2)
        elif view.is_root:
            cr.set_source_rgb(*self.COLORS['root_border'])
            cr.set_line_width(2)
        else:
            cr.set_source_rgb(*self.COLORS['border_subtle'])
            cr.set_line_width(1)
        cr.stroke()

        cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL,
                            cairo.FONT_WEIGHT_BOLD if view.is_root else cairo.FONT_WEIGHT_NORMAL)
        cr.set_font_size(13)
        text_x = x + self.NODE_PADDING
        text_y = y + h / 2

        if is_editing:
            self._draw_edit_text(cr, text_x, text_y)
        else:
            text = view.label
            extents = cr.text_extents(text)
            max_width = w - self.NODE_PADDING * 2
            while extents.width > max_width and len(text) > 3:
                text = text[:-4] + "..."
                extents = cr.text_extents(text)
            cr.set_source_rgb(*self.COLORS['text_primary'])
            cr.move_to(text_x, text_y + extents.height / 2 - 2)
            cr.show_text(text)

        if view.can_collapse:
            self._draw_badge(cr, box)

        if view.mode is Mode.EDIT:
            add_x, add_y = self._add_button_center(box)
            self._draw_button(cr, add_x, add_y, "+", self.COLORS['accent'])
            if view.can_delete:
                del_x, del_y = self._delete_button_center(box)
                self._draw_button(cr, del_x, del_y, "×", self.COLORS['danger'])

        cr.restore()

    def _draw_badge(self, cr, box: NodeBox):
        """Collapse toggle: '+N' when collapsed, '−' otherwise."""
        cx, cy = self._badge_center(box)
        label = f"+{box.view.children_count}" if box.view.is_collapsed else "−"

        cr.set_font_size(10)
        extents = cr.text_extents(label)
        half_w = max(self.BADGE_RADIUS, extents.width / 2 + 5)

        self._draw_rounded_rect(cr, cx - half_w, cy - self.BADGE_RADIUS,
                                half_w * 2, self.BADGE_RADIUS * 2, self.BADGE_RADIUS)
        cr.set_source_rgb(*self.COLORS['bg_secondary'])
        cr.fill_preserve()
        cr.set_source_rgb(*self.COLORS['text_muted'])
        cr.set_line_width(1)
        cr.stroke()

        cr.set_source_rgb(*self.COLORS['text_primary'])
        cr.move_to(cx - extents.width / 2 - extents.x_bearing,
                   cy - extents.height / 2 - extents.y_bearing)
        cr.show_text(label)

    def _draw_button(self, cr, cx: float, cy: float, glyph: str, color):
        cr.arc(cx, cy, self.BUTTON_RADIUS, 0, 2 * math.pi)
        cr.set_source_rgb(*color)
        cr.fill()

        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.set_font_size(12)
        extents = cr.text_extents(glyph)
        cr.move_to(cx - extents.width / 2 - extents.x_bearing,
                   cy - extents.height / 2 - extents.y_bearing)
        cr.show_text(glyph)

    def _draw_edit_text(self, cr, x: float, y: float):
        """Draw text being edited with cursor."""
        extents = cr.text_extents(self.edit_text or "M")

        if self.is_placeholder_text:
            cr.set_source_rgb(*self.COLORS['text_muted'])
        else:
            cr.set_source_rgb(*self.COLORS['text_primary'])
        cr.move_to(x, y + extents.height / 2 - 2)
        cr.show_text(self.edit_text)

        if self.cursor_visible:
            before = self.edit_text[:self.edit_cursor_pos]
            cursor_x = x + (cr.text_extents(before).x_advance if before else 0)
            cr.set_source_rgb(*self.COLORS['accent'])
            cr.set_line_width(2)
            cr.move_to(cursor_x, y - extents.height / 2)
            cr.line_to(cursor_x, y + extents.height / 2 + 2)
            cr.stroke()

    def _draw_rounded_rect(self, cr, x: float, y: float, w: float, h: float, radius: float):
        """Draw a rounded rectangle path."""
        cr.new_path()
        cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
        cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
        cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
        cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
        cr.close_path()

    def _draw_minimap(self, cr, width: float, height: float):
        """Draw minimap in corner."""
        minimap_width = 180
        minimap_height = 120
        padding = 16

        mm_x = width - minimap_width - padding
        mm_y = height - minimap_height - padding

        cr.save()
        self._draw_rounded_rect(cr, mm_x, mm_y, minimap_width, minimap_height, 4)
        cr.set_source_rgba(*self.COLORS['bg_secondary'], 0.9)
        cr.fill_preserve()
        cr.set_source_rgb(*self.COLORS['border_subtle'])
        cr.set_line_width(1)
        cr.stroke()

        cr.rectangle(mm_x + 2, mm_y + 2, minimap_width - 4, minimap_height - 4)
        cr.clip()

        min_x, min_y, max_x, max_y = self._bounds()
        map_width = max_x - min_x + 100
        map_height = max_y - min_y + 100
        scale = min((minimap_width - 8) / map_width, (minimap_height - 8) / map_height)

        offset_x = mm_x + 4 + ((minimap_width - 8) - map_width * scale) / 2
        offset_y = mm_y + 4 + ((minimap_height - 8) - map_height * scale) / 2

        cr.set_source_rgb(*self.COLORS['text_muted'])
        for box in self.boxes.values():
            cr.rectangle(offset_x + (box.x - min_x + 50) * scale,
                         offset_y + (box.y - min_y + 50) * scale,
                         max(4, box.width * scale), max(2, box.height * scale))
            cr.fill()

        # Viewport indicator
        vp_x = offset_x + (-self.pan_x / self.zoom - min_x + 50) * scale
        vp_y = offset_y + (-self.pan_y / self.zoom - min_y + 50) * scale
        vp_w = width / self.zoom * scale
        vp_h = height / self.zoom * scale

        cr.set_source_rgba(*self.COLORS['accent'], 0.3)
        cr.rectangle(vp_x, vp_y, vp_w, vp_h)
        cr.fill()
        cr.restore()

    # ==================== Geometry ====================

    def _bounds(self) -> Tuple[float, float, float, float]:
        boxes = self.boxes.values()
        return (min(b.x for b in boxes), min(b.y for b in boxes),
                max(b.x + b.width for b in boxes), max(b.y + b.height for b in boxes))

    def _badge_center(self, box: NodeBox) -> Tuple[float, float]:
        return box.anchor(box.view.child_link_side)

    def _add_button_center(self, box: NodeBox) -> Tuple[float, float]:
        return box.x + box.width - 4, box.y - 4

    def _delete_button_center(self, box: NodeBox) -> Tuple[float, float]:
        return box.x + 4, box.y - 4

    def _to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        return (x - self.pan_x) / self.zoom, (y - self.pan_y) / self.zoom

    def _find_node_at(self, x: float, y: float) -> Optional[NodeBox]:
        """Find the node at the given screen coordinates."""
        canvas_x, canvas_y = self._to_canvas(x, y)
        for box in reversed(list(self.boxes.values())):
            if box.contains_point(canvas_x, canvas_y):
                return box
        return None

    def _find_control_at(self, x: float, y: float) -> Optional[Tuple[str, NodeBox]]:
        """Find a badge or edit button under the pointer."""
        canvas_x, canvas_y = self._to_canvas(x, y)

        def hit(center, radius):
            return math.hypot(canvas_x - center[0], canvas_y - center[1]) <= radius + 2

        for box in reversed(list(self.boxes.values())):
            view = box.view
            if view.mode is Mode.EDIT:
                if hit(self._add_button_center(box), self.BUTTON_RADIUS):
                    return "add", box
                if view.can_delete and hit(self._delete_button_center(box), self.BUTTON_RADIUS):
                    return "delete", box
            if view.can_collapse and hit(self._badge_center(box), self.BADGE_RADIUS):
                return "toggle", box
        return None

    # ==================== Input ====================

    def _on_click(self, gesture, n_press, x, y):
        """Handle mouse click."""
        self.grab_focus()

        control = self._find_control_at(x, y)
        if control and n_press == 1:
            action, box = control
            self.commit_edit()
            if action == "toggle":
                box.view.toggle_collapse()
            elif action == "add":
                box.view.add_child()
            elif action == "delete":
                box.view.delete()
            return

        clicked = self._find_node_at(x, y)
        if self.editing_id and (clicked is None or clicked.view.id != self.editing_id):
            # Clicking elsewhere commits, like losing focus
            self.commit_edit()

        if n_press == 2 and clicked and self.session.is_editing:
            self.start_editing(clicked.view.id)

    def _on_motion(self, controller, x, y):
        self.last_mouse_x = x
        self.last_mouse_y = y

        box = self._find_node_at(x, y)
        new_hover = box.view.id if box else None
        if new_hover != self.hovered_id:
            self.hovered_id = new_hover
            self.queue_draw()

    def _on_leave(self, controller):
        if self.hovered_id:
            self.hovered_id = None
            self.queue_draw()

    def _on_scroll(self, controller, dx, dy):
        """Ctrl+scroll zooms towards the pointer, plain scroll pans."""
        state = controller.get_current_event_state()
        if state & Gdk.ModifierType.CONTROL_MASK:
            old_zoom = self.zoom
            zoom_factor = 1.1 if dy < 0 else 0.9
            self.zoom = max(self.MIN_ZOOM, min(self.MAX_ZOOM, self.zoom * zoom_factor))

            if old_zoom != self.zoom:
                mouse_x, mouse_y = self.last_mouse_x, self.last_mouse_y
                self.pan_x = mouse_x - (mouse_x - self.pan_x) * (self.zoom / old_zoom)
                self.pan_y = mouse_y - (mouse_y - self.pan_y) * (self.zoom / old_zoom)
                self.queue_draw()
            return True

        self.pan_x -= dx * 30
        self.pan_y -= dy * 30
        self.queue_draw()
        return True

    def _on_drag_begin(self, gesture, start_x, start_y):
        """Start a pan, or a node move when editing."""
        box = self._find_node_at(start_x, start_y)

        if box and self.session.is_editing and not self.editing_id:
            self._drag_pending_id = box.view.id
            self._drag_exceeded_threshold = False
            self.dragging_id = None
            self.drag_start_node_x = box.x
            self.drag_start_node_y = box.y
            self.is_panning = False
        else:
            self._drag_pending_id = None
            self._drag_exceeded_threshold = False
            self.dragging_id = None
            self.is_panning = True
            self.pan_start_x = self.pan_x
            self.pan_start_y = self.pan_y

    def _on_drag_update(self, gesture, offset_x, offset_y):
        if self._drag_pending_id and not self._drag_exceeded_threshold:
            if math.hypot(offset_x, offset_y) < self._drag_threshold:
                return
            self._drag_exceeded_threshold = True
            self.dragging_id = self._drag_pending_id

        if self.dragging_id:
            box = self.boxes.get(self.dragging_id)
            if box:
                box.x = self.drag_start_node_x + offset_x / self.zoom
                box.y = self.drag_start_node_y + offset_y / self.zoom
                self.queue_draw()
        elif self.is_panning:
            self.pan_x = self.pan_start_x + offset_x
            self.pan_y = self.pan_start_y + offset_y
            self.queue_draw()

    def _on_drag_end(self, gesture, offset_x, offset_y):
        dragged = self.dragging_id
        self._drag_pending_id = None
        self.dragging_id = None
        self.is_panning = False

        if dragged and dragged in self.boxes:
            box = self.boxes[dragged]
            self.session.on_node_moved(dragged, box.x, box.y)

    def _on_key_pressed(self, controller, keyval, keycode, state):
        ctrl = state & Gdk.ModifierType.CONTROL_MASK

        if self.editing_id:
            return self._handle_edit_key(keyval)

        if ctrl and keyval in (Gdk.KEY_plus, Gdk.KEY_equal):
            self.zoom_in()
            return True
        if ctrl and keyval == Gdk.KEY_minus:
            self.zoom_out()
            return True
        if ctrl and keyval == Gdk.KEY_0:
            self.fit_view()
            return True
        return False

    def _handle_edit_key(self, keyval) -> bool:
        """Handle keyboard input during inline rename."""
        if keyval in (Gdk.KEY_Return, Gdk.KEY_KP_Enter):
            self.commit_edit()
            return True

        if keyval == Gdk.KEY_Escape:
            self.cancel_edit()
            return True

        if keyval == Gdk.KEY_BackSpace:
            if self.is_placeholder_text:
                self.edit_text = ""
                self.edit_cursor_pos = 0
                self.is_placeholder_text = False
            elif self.edit_cursor_pos > 0:
                self.edit_text = self.edit_text[:self.edit_cursor_pos - 1] + self.edit_text[self.edit_cursor_pos:]
                self.edit_cursor_pos -= 1
            self.queue_draw()
            return True

        if keyval == Gdk.KEY_Delete:
            if self.edit_cursor_pos < len(self.edit_text):
                self.edit_text = self.edit_text[:self.edit_cursor_pos] + self.edit_text[self.edit_cursor_pos + 1:]
            self.queue_draw()
            return True

        if keyval == Gdk.KEY_Left:
            self.edit_cursor_pos = max(0, self.edit_cursor_pos - 1)
            self.queue_draw()
            return True

        if keyval == Gdk.KEY_Right:
            self.edit_cursor_pos = min(len(self.edit_text), self.edit_cursor_pos + 1)
            self.queue_draw()
            return True

        if keyval == Gdk.KEY_Home:
            self.edit_cursor_pos = 0
            self.queue_draw()
            return True

        if keyval == Gdk.KEY_End:
            self.edit_cursor_pos = len(self.edit_text)
            self.queue_draw()
            return True

        uc = Gdk.keyval_to_unicode(keyval)
        if uc and chr(uc).isprintable():
            char = chr(uc)
            if self.is_placeholder_text:
                self.edit_text = char
                self.edit_cursor_pos = 1
                self.is_placeholder_text = False
            else:
                self.edit_text = self.edit_text[:self.edit_cursor_pos] + char + self.edit_text[self.edit_cursor_pos:]
                self.edit_cursor_pos += 1
            self.queue_draw()
            return True

        return False

    # ==================== Inline rename ====================

    def start_editing(self, node_id: str):
        """Open the inline editor on a node's current label."""
        box = self.boxes.get(node_id)
        if box is None:
            return
        self.editing_id = node_id
        self.edit_text = box.view.label
        self.edit_cursor_pos = len(self.edit_text)
        self.is_placeholder_text = False
        self._start_cursor_blink()
        self.queue_draw()

    def start_editing_placeholder(self, node_id: str):
        """Start editing with placeholder text (greyed, replaced on type)."""
        self.start_editing(node_id)
        self.is_placeholder_text = True

    def _start_cursor_blink(self):
        self.cursor_visible = True
        if self.cursor_blink_id:
            GLib.source_remove(self.cursor_blink_id)
        self.cursor_blink_id = GLib.timeout_add(530, self._blink_cursor)

    def _blink_cursor(self) -> bool:
        if self.editing_id:
            self.cursor_visible = not self.cursor_visible
            self.queue_draw()
            return True
        self.cursor_blink_id = None
        return False

    def commit_edit(self):
        """Hand the edited label to the session; it ignores empty or unchanged text."""
        if not self.editing_id:
            return
        box = self.boxes.get(self.editing_id)
        text = self.edit_text
        self._stop_editing()
        if box is not None:
            box.view.rename(text)
        self.queue_draw()

    def cancel_edit(self):
        """Drop the edit and keep the old label."""
        node_id = self.editing_id
        self._stop_editing()
        if node_id and node_id == self.session.pending_rename:
            self.session.pending_rename = None
        self.queue_draw()

    def _stop_editing(self):
        self.editing_id = None
        self.edit_text = ""
        self.edit_cursor_pos = 0
        self.is_placeholder_text = False

        if self.cursor_blink_id:
            GLib.source_remove(self.cursor_blink_id)
            self.cursor_blink_id = None

    # ==================== Viewport ====================

    def zoom_in(self):
        self.zoom = min(self.MAX_ZOOM, self.zoom * 1.2)
        self.queue_draw()

    def zoom_out(self):
        self.zoom = max(self.MIN_ZOOM, self.zoom / 1.2)
        self.queue_draw()

    def fit_view(self, padding: float = 0.2):
        """Zoom and pan so every visible node is on screen."""
        if not self.boxes:
            return

        width = self.get_width()
        height = self.get_height()
        if width <= 0 or height <= 0:
            return

        min_x, min_y, max_x, max_y = self._bounds()
        map_width = (max_x - min_x) * (1 + padding) or 1
        map_height = (max_y - min_y) * (1 + padding) or 1

        self.zoom = max(self.MIN_ZOOM, min(width / map_width, height / map_height, 1.0))

        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        self.pan_x = width / 2 - center_x * self.zoom
        self.pan_y = height / 2 - center_y * self.zoom
        self.queue_draw()
