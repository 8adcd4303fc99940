"""BranchMap launcher.

Provides a stable entry point that sets up logging and runs preflight checks
before importing GTK-related modules, which gives clearer error messages on
new systems.
"""

from __future__ import annotations

import sys


def main() -> int:
    from branchmap.cli import parse_args
    from branchmap.database import get_data_dir
    from branchmap.log import configure_logging
    from branchmap.preflight import run_preflight_or_die

    options, _ = parse_args(sys.argv[1:])
    configure_logging(options.log_level, log_file=get_data_dir() / "branchmap.log")

    run_preflight_or_die(require_display=True, check_deps=True)

    from branchmap.app import main as app_main

    return int(app_main())


if __name__ == "__main__":
    raise SystemExit(main())
