"""Main BranchMap application."""

import sys
from pathlib import Path
from typing import List, Optional

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, Gio, GLib, Adw

from loguru import logger

from branchmap import __version__, __app_id__
from branchmap.canvas import MindMapCanvas
from branchmap.cli import create_session, parse_args
from branchmap.config import save_settings
from branchmap.database import Database
from branchmap.models import LayoutDirection, Mode
from branchmap.session import MindMapSession


DIRECTIONS = [LayoutDirection.LEFT_RIGHT, LayoutDirection.TOP_BOTTOM]
FIT_DELAY_MS = 100


def glib_scheduler(delay_ms: int, callback):
    """Run callback once on the main loop after delay_ms."""
    def fire():
        callback()
        return GLib.SOURCE_REMOVE
    GLib.timeout_add(delay_ms, fire)


class BranchMapWindow(Adw.ApplicationWindow):
    """Main application window."""

    def __init__(self, app: Adw.Application, session: MindMapSession):
        super().__init__(application=app)
        self.session = session

        self.set_title("BranchMap")
        self.set_default_size(1280, 800)

        self._load_css()
        self._build_ui()
        self._setup_shortcuts()

        session.on_view_changed = self.canvas.set_projection
        session.on_notice = self._show_toast
        session.on_mode_changed = self._on_mode_changed
        session.on_layout_applied = self._on_layout_applied
        session.on_saved = lambda: self._show_toast("Mind map saved")

        self._on_mode_changed(session.mode)
        # Wait for the first allocation before fitting
        GLib.timeout_add(FIT_DELAY_MS, self._fit_once)

    def _load_css(self):
        """Load custom CSS theme."""
        css_provider = Gtk.CssProvider()
        css_path = Path(__file__).parent / "theme.css"

        if css_path.exists():
            css_provider.load_from_path(str(css_path))
            Gtk.StyleContext.add_provider_for_display(
                Gdk.Display.get_default(),
                css_provider,
                Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
            )

    def _build_ui(self):
        """Build the main UI layout."""
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        main_box.append(self._build_header())

        self.canvas = MindMapCanvas(self.session)
        canvas_frame = Gtk.Frame()
        canvas_frame.set_child(self.canvas)
        canvas_frame.add_css_class("canvas-container")
        canvas_frame.set_vexpand(True)

        # Wrap in toast overlay for in-app notifications
        self.toast_overlay = Adw.ToastOverlay()
        self.toast_overlay.set_child(canvas_frame)
        main_box.append(self.toast_overlay)

        self.set_content(main_box)

    def _build_header(self) -> Adw.HeaderBar:
        """Build the header bar."""
        header = Adw.HeaderBar()
        header.add_css_class("flat")

        self.edit_btn = Gtk.Button(label="Edit")
        self.edit_btn.set_tooltip_text("Edit the map (Ctrl+E)")
        self.edit_btn.connect("clicked", lambda b: self.session.enter_edit())
        header.pack_start(self.edit_btn)

        self.save_btn = Gtk.Button(label="Save")
        self.save_btn.add_css_class("suggested-action")
        self.save_btn.set_tooltip_text("Save and re-layout (Ctrl+S)")
        self.save_btn.connect("clicked", lambda b: self._save())
        header.pack_start(self.save_btn)

        self.cancel_btn = Gtk.Button(label="Cancel")
        self.cancel_btn.set_tooltip_text("Back to view mode (Escape)")
        self.cancel_btn.connect("clicked", lambda b: self._cancel())
        header.pack_start(self.cancel_btn)

        self.mode_label = Gtk.Label()
        self.mode_label.add_css_class("mode-label")
        header.set_title_widget(self.mode_label)

        fit_btn = Gtk.Button()
        fit_btn.set_icon_name("zoom-fit-best-symbolic")
        fit_btn.set_tooltip_text("Fit view (Ctrl+0)")
        fit_btn.connect("clicked", lambda b: self.canvas.fit_view())
        header.pack_end(fit_btn)

        direction_model = Gtk.StringList.new(["Left to Right", "Top to Bottom"])
        self.direction_dropdown = Gtk.DropDown(model=direction_model)
        self.direction_dropdown.set_tooltip_text("Layout direction")
        self.direction_dropdown.set_selected(DIRECTIONS.index(self.session.direction))
        self.direction_dropdown.connect("notify::selected", self._on_direction_changed)
        header.pack_end(self.direction_dropdown)

        return header

    def _setup_shortcuts(self):
        """Setup keyboard shortcuts."""
        actions = [
            ("edit", self.session.enter_edit, "<Control>e"),
            ("save", self._save, "<Control>s"),
            ("cancel", self._cancel, None),
            ("fit-view", self.canvas.fit_view, "<Control>0"),
            ("toggle-grid", self._toggle_grid, None),
            ("toggle-minimap", self._toggle_minimap, "<Control>m"),
            ("quit", lambda: self.close(), "<Control>q"),
        ]

        for name, callback, accel in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", lambda a, p, cb=callback: cb())
            self.add_action(action)

            if accel:
                self.get_application().set_accels_for_action(f"win.{name}", [accel])

    def _save(self):
        # An open inline edit is part of what gets saved
        self.canvas.commit_edit()
        self.session.save()
        self._update_buttons()

    def _cancel(self):
        if self.canvas.editing_id:
            self.canvas.cancel_edit()
            return
        self.session.cancel_edit()

    def _on_mode_changed(self, mode: Mode):
        self.mode_label.set_label("Editing" if mode is Mode.EDIT else "Viewing")
        self._update_buttons()

    def _update_buttons(self):
        editing = self.session.is_editing
        self.edit_btn.set_visible(not editing)
        self.save_btn.set_visible(editing)
        self.cancel_btn.set_visible(editing)
        self.save_btn.set_sensitive(not self.session.is_saving)

    def _on_layout_applied(self):
        self._update_buttons()
        # Let the canvas pick up the new boxes first
        GLib.timeout_add(FIT_DELAY_MS, self._fit_once)

    def _fit_once(self) -> bool:
        self.canvas.fit_view()
        return GLib.SOURCE_REMOVE

    def _on_direction_changed(self, dropdown, _param):
        direction = DIRECTIONS[dropdown.get_selected()]
        if direction is not self.session.direction:
            self.session.set_direction(direction)

    def _toggle_grid(self):
        self.canvas.show_grid = not self.canvas.show_grid
        self.session.settings.show_grid = self.canvas.show_grid
        self.canvas.queue_draw()

    def _toggle_minimap(self):
        self.canvas.show_minimap = not self.canvas.show_minimap
        self.session.settings.show_minimap = self.canvas.show_minimap
        self.canvas.queue_draw()

    def _show_toast(self, message: str):
        """Show a toast notification."""
        self._update_buttons()
        toast = Adw.Toast(title=message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)


class BranchMapApp(Adw.Application):
    """Main application class."""

    def __init__(self, session: MindMapSession, db: Optional[Database] = None):
        super().__init__(
            application_id=__app_id__,
            flags=Gio.ApplicationFlags.NON_UNIQUE
        )
        self.session = session
        self.db = db
        self.window: Optional[BranchMapWindow] = None

    def do_startup(self):
        """Initialize application."""
        Adw.Application.do_startup(self)

        style_manager = Adw.StyleManager.get_default()
        style_manager.set_color_scheme(Adw.ColorScheme.FORCE_DARK)

    def do_activate(self):
        """Activate application."""
        if not self.window:
            self.window = BranchMapWindow(self, self.session)
            logger.info(f"BranchMap {__version__} started")

        self.window.present()

    def do_shutdown(self):
        """Shutdown application."""
        if self.db:
            # Keep direction and grid/minimap toggles for the next start
            save_settings(self.db, self.session.settings)
            self.db.close()

        Adw.Application.do_shutdown(self)


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    argv = list(sys.argv if argv is None else argv)
    options, remaining = parse_args(argv[1:])

    db = Database()
    try:
        session = create_session(options, db=db, scheduler=glib_scheduler)
    except (OSError, ValueError) as exc:
        db.close()
        logger.error(f"Could not load the mind map: {exc}")
        sys.stderr.write(f"branchmap: {exc}\n")
        return 1

    app = BranchMapApp(session, db)
    return app.run([argv[0]] + remaining)


if __name__ == "__main__":
    sys.exit(main())
