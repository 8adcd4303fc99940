"""Environment and dependency preflight checks.

Run before anything imports GTK so a missing display or missing bindings
produce a readable message instead of a traceback.
Set BRANCHMAP_SKIP_PREFLIGHT=1 to bypass (useful for development).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class PreflightResult:
    ok: bool
    message: str


def _has_display(environ: Mapping[str, str]) -> bool:
    return bool(environ.get("WAYLAND_DISPLAY") or environ.get("DISPLAY"))


def _check_python_deps() -> Optional[str]:
    """Return an error message if required deps are missing."""
    try:
        import cairo  # type: ignore[import-not-found]  # noqa: F401
    except ImportError as exc:
        return (
            "Missing Python dependency 'pycairo'. "
            "Install the GUI extra with: pip install 'branchmap[gui]'. "
            f"Underlying error: {exc}"
        )

    try:
        import gi  # type: ignore[import-not-found]

        gi.require_version("Gtk", "4.0")
        gi.require_version("Adw", "1")
        gi.require_version("Gdk", "4.0")
        from gi.repository import Gtk, Adw, Gdk  # type: ignore[import-not-found]  # noqa: F401
    except (ImportError, ValueError) as exc:
        return (
            "Missing GTK 4/libadwaita bindings. Install PyGObject and the "
            "gtk4 and libadwaita system packages. "
            f"Underlying error: {exc}"
        )

    return None


def run_preflight(
    *,
    require_display: bool = True,
    check_deps: bool = True,
    environ: Optional[Mapping[str, str]] = None,
) -> PreflightResult:
    """Run checks and return a structured result."""
    environ = os.environ if environ is None else environ

    if environ.get("BRANCHMAP_SKIP_PREFLIGHT") == "1":
        return PreflightResult(True, "Preflight skipped via BRANCHMAP_SKIP_PREFLIGHT=1")

    if require_display and not _has_display(environ):
        return PreflightResult(
            False,
            "No graphical display found (neither WAYLAND_DISPLAY nor DISPLAY is set). "
            "Set BRANCHMAP_SKIP_PREFLIGHT=1 to bypass.",
        )

    if check_deps:
        dep_error = _check_python_deps()
        if dep_error:
            return PreflightResult(False, dep_error)

    return PreflightResult(True, "Preflight OK")


def run_preflight_or_die(
    *,
    require_display: bool = True,
    check_deps: bool = True,
) -> None:
    result = run_preflight(require_display=require_display, check_deps=check_deps)
    if result.ok:
        return

    sys.stderr.write("\nBranchMap preflight check failed:\n")
    sys.stderr.write(result.message)
    sys.stderr.write("\n\n")
    raise SystemExit(1)
